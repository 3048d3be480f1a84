"""Helpers for scanner identifiers of the form name@version or @scope@name@version."""

from typing import Tuple


def split_identifier(identifier: str) -> Tuple[str, str]:
    """
    Split a scanner identifier into package name and version.

    Three "@"-separated segments mean a scoped package, whose name keeps
    its "@" prefix. Anything else is read as name, then version.
    """
    parts = identifier.split("@")
    if len(parts) == 3:
        return f"@{parts[1]}", parts[2]
    return parts[0], parts[1] if len(parts) > 1 else ""


def get_name(identifier: str) -> str:
    """Package name part of a name@version identifier."""
    return split_identifier(identifier)[0]


def get_version(identifier: str) -> str:
    """Version part of a name@version identifier."""
    return split_identifier(identifier)[1]
