"""Shape checks for GitHub logins and ``owner/name`` repository references."""

from __future__ import annotations

import re

# Alphanumerics and single inner hyphens, at most 39 characters.
GITHUB_LOGIN_PATTERN = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]{0,37}[A-Za-z0-9])?$")

REPOSITORY_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{1,100}$")


def is_github_login(value: str) -> bool:
    """Return whether ``value`` is shaped like a GitHub login."""
    return GITHUB_LOGIN_PATTERN.fullmatch(value) is not None


def split_repository(full_name: str) -> tuple[str, str] | None:
    """Split ``owner/name`` into its parts, or return ``None`` when malformed."""
    owner, separator, name = full_name.strip().partition("/")
    if not separator or not is_github_login(owner):
        return None
    if REPOSITORY_NAME_PATTERN.fullmatch(name) is None or name in {".", ".."}:
        return None
    return owner, name
