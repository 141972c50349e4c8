"""Text-to-speech narration components."""

from .narrator import NarrationProvider, OpenAINarrationProvider

__all__ = ["NarrationProvider", "OpenAINarrationProvider"]
