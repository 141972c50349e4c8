"""Prompt templates for dialogue transcript generation."""

from __future__ import annotations

from dataclasses import dataclass

_SYSTEM_PROMPT = (
    "You are an expert at converting technical documentation into natural conversations "
    "between a student and a teacher. Keep the technical accuracy but make it engaging and "
    "easier to understand. IMPORTANT: Output should have at most 4096 characters. It is also "
    "important to not include any json or code blocks in the output."
)

_USER_PREAMBLE = (
    "Convert the following markdown documentation into a natural conversation between two "
    "Software Developers, first named Jaf is an expert in the protocol we are talking about, "
    "a second named Paul is a frontend developer who is new to this protocol. "
    "Preserve all technical information but make it more engaging:"
)


@dataclass(frozen=True, slots=True)
class DialoguePrompt:
    """Fixed system/user prompt pair sent with every transcript request."""

    system: str = _SYSTEM_PROMPT
    user: str = _USER_PREAMBLE

    def user_message(self, document_text: str) -> str:
        """Return the user message: preamble, a blank line, then the document text."""

        return f"{self.user}\n\n{document_text}"


def intro_script(chapter_id: str) -> str:
    """Return the spoken intro text for one chapter."""

    return f"Chapter {chapter_id}. About {chapter_id}."
