"""Interactive yes/no prompts.

Only a stripped, case-insensitive "y" counts as yes. Every other answer,
including "yes" and an empty line, is treated as no.
"""

from typing import Protocol

import typer


class Prompter(Protocol):
    """Capability for asking the user a question."""

    def ask(self, question: str) -> str: ...


class ConsolePrompter:
    """Prompter reading answers from standard input."""

    def ask(self, question: str) -> str:
        try:
            return typer.prompt(
                f"{question} (y/n)", default="", show_default=False, prompt_suffix=": "
            )
        except typer.Abort as e:
            # Closed stdin reads as an empty answer; Ctrl-C still aborts
            if isinstance(e.__context__, EOFError):
                return ""
            raise


def is_affirmative(answer: str) -> bool:
    """Return True if the answer means yes."""
    return answer.strip().lower() == "y"


def ask_yes_no(prompter: Prompter, question: str) -> bool:
    """Ask a yes/no question and normalise the answer."""
    return is_affirmative(prompter.ask(question))


__all__ = ["ConsolePrompter", "Prompter", "ask_yes_no", "is_affirmative"]
