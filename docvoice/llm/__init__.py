"""LLM integrations for dialogue transcript generation.

Modules:
- `http_client`: shared requests-based JSON client and response extraction.
- `prompts`: fixed dialogue and intro templates.
- `transcript`: transcript provider protocol and local/remote variants.
"""

from .http_client import JSONPostClient
from .prompts import DialoguePrompt, intro_script
from .transcript import OllamaTranscriptProvider, OpenAITranscriptProvider, TranscriptProvider

__all__ = [
    "DialoguePrompt",
    "JSONPostClient",
    "OllamaTranscriptProvider",
    "OpenAITranscriptProvider",
    "TranscriptProvider",
    "intro_script",
]
