"""Repository-name to label-identifier normalization.

GitHub allows ``[A-Za-z0-9_.-]`` in owner and repository names, while label
values published by the labeler must match ``^[a-z-]+$``. The mapping is
deterministic, so one repository always maps to one label, but it is not
injective: ``org/repo-1`` and ``org/repo.one`` share ``org-repo-one``.
"""

from __future__ import annotations

import re

LABEL_IDENTIFIER_PATTERN = re.compile(r"^[a-z-]+$")

# labelValueDefinition identifiers are capped at 100 characters.
MAX_LABEL_IDENTIFIER_LENGTH = 100

DIGIT_WORDS: tuple[str, ...] = (
    "zero",
    "one",
    "two",
    "three",
    "four",
    "five",
    "six",
    "seven",
    "eight",
    "nine",
)

_OUTSIDE_ALPHABET = re.compile(r"[^a-z-]")


def normalize_label_identifier(repo_full_name: str) -> str:
    """Map ``org/repo`` onto the lowercase letters-and-hyphens label alphabet.

    Steps, in order: the org/repo separator becomes ``-``; ``_`` and ``.``
    become ``-``; the result is lowercased; every occurrence of each digit is
    spelled out. Anything still outside the alphabet folds to ``-``.

    Blank input raises ``ValueError``. Long names can expand past
    ``MAX_LABEL_IDENTIFIER_LENGTH``; callers check with ``is_label_identifier``.
    """
    if repo_full_name.strip() == "":
        raise ValueError("repository name is required")
    identifier = (
        repo_full_name.replace("/", "-", 1)
        .replace("_", "-")
        .replace(".", "-")
        .lower()
    )
    for digit, word in enumerate(DIGIT_WORDS):
        identifier = identifier.replace(str(digit), word)
    return _OUTSIDE_ALPHABET.sub("-", identifier)


def is_label_identifier(value: str) -> bool:
    """Return whether ``value`` is a valid, publishable label identifier."""
    if len(value) > MAX_LABEL_IDENTIFIER_LENGTH:
        return False
    return LABEL_IDENTIFIER_PATTERN.fullmatch(value) is not None
