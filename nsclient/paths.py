"""Pure helpers over remote location strings.

A location is an absolute, ``/``-separated path. Root is always ``"/"``;
any other location has no trailing separator.
"""
from typing import Optional

ROOT = "/"
SEPARATOR = "/"


class InvalidNameError(ValueError):
    pass


def normalize(location: str) -> str:
    segments = [s for s in (location or "").split(SEPARATOR) if s]
    if not segments:
        return ROOT
    return SEPARATOR + SEPARATOR.join(segments)


def parent_of(location: str) -> Optional[str]:
    if location == ROOT:
        return None
    parent = location[: location.rfind(SEPARATOR)]
    if parent == "":
        return ROOT
    return parent


def child_path(location: str, name: str) -> str:
    # the caller validates ``name``; see validate_name
    if location == ROOT:
        return ROOT + name
    return f"{location}{SEPARATOR}{name}"


def leaf_name(path: str) -> str:
    return normalize(path).rsplit(SEPARATOR, 1)[-1]


def validate_name(name: str) -> str:
    """Return ``name`` if it can be used as a single path segment.

    Raises InvalidNameError for blank names, names with a separator and the
    relative names ``.`` and ``..``.
    """
    if not name or not name.strip():
        raise InvalidNameError("Name is empty")
    if SEPARATOR in name:
        raise InvalidNameError(f"Name must not contain '{SEPARATOR}': {name!r}")
    if name in (".", ".."):
        raise InvalidNameError(f"Reserved name: {name!r}")
    return name
