"""Prompt and line continuations."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class PromptContext(Protocol):
    """State the editor exposes to prompts while rendering.

    Nothing is required yet; line number, soft wrap count and vi input mode
    only matter to prompts with line continuations.
    """


@runtime_checkable
class Prompt(Protocol):
    """Text shown before the edited input."""

    def get_prompt(self, ctx: PromptContext | None) -> str:
        """Text for the first line, or for the following lines when
        ``has_continuation()`` is true."""
        ...

    def has_continuation(self) -> bool:
        """Whether line continuations should be displayed."""
        ...


class StaticPrompt:
    """A prompt that always renders the same text."""

    def __init__(self, text: str) -> None:
        self.text = text

    def get_prompt(self, ctx: PromptContext | None) -> str:
        return self.text

    def has_continuation(self) -> bool:
        return False


def render_prompt(prompt: Prompt | str, ctx: PromptContext | None = None) -> str:
    if isinstance(prompt, str):
        return prompt
    return prompt.get_prompt(ctx)
