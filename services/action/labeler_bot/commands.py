"""Classify inbound chat text into bot commands."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

VERIFY_PREFIX = "github:"
REPO_PREFIX = "repo:"
RESET_COMMAND = "/reset"
LABELS_COMMAND = "/labels"


class CommandKind(str, Enum):
    """Command recognized from one message."""

    VERIFY = "verify"
    CLAIM_REPO = "claim_repo"
    RESET = "reset"
    LIST_LABELS = "list_labels"
    HELP = "help"


@dataclass(frozen=True)
class Command:
    kind: CommandKind
    argument: str = ""


def parse_command(text: str) -> Command:
    """Return the command for ``text``.

    Prefixes are case-sensitive and matched after stripping surrounding
    whitespace. Anything unrecognized, ``/help`` included, is a help request.
    """
    stripped = text.strip()
    if stripped.startswith(VERIFY_PREFIX):
        return Command(CommandKind.VERIFY, stripped[len(VERIFY_PREFIX) :].strip())
    if stripped.startswith(REPO_PREFIX):
        return Command(CommandKind.CLAIM_REPO, stripped[len(REPO_PREFIX) :].strip())
    if stripped == RESET_COMMAND:
        return Command(CommandKind.RESET)
    if stripped == LABELS_COMMAND:
        return Command(CommandKind.LIST_LABELS)
    return Command(CommandKind.HELP)
