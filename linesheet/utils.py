"""Helper utilities for the linesheet pipeline."""

from __future__ import annotations

import re
from typing import Any, Callable, Iterable, List, Optional, Sequence, TypeVar

T = TypeVar("T")

_SLUGIFY_PATTERN = re.compile(r"[^a-z0-9-]+")
_TOKEN_SEPARATORS = re.compile(r"[,;|]")


def slugify(value: str) -> str:
    value = (value or "").lower()
    value = value.strip().replace(" ", "-")
    value = _SLUGIFY_PATTERN.sub("-", value)
    value = re.sub(r"-+", "-", value)
    return value.strip("-") or "linesheet"


def safe_filename(value: str) -> str:
    """Replace every non-alphanumeric character with an underscore, lower-cased."""

    return re.sub(r"[^a-zA-Z0-9]", "_", value or "").lower()


def split_tokens(raw: str | Iterable[str] | None) -> List[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        parts = [part.strip() for part in _TOKEN_SEPARATORS.split(raw)]
    else:
        parts = [str(part).strip() for part in raw]
    return [part for part in parts if part]


def nodes(value: Any) -> List[Any]:
    """Flatten a GraphQL connection (``{"edges": [{"node": ...}]}``) or plain list."""

    if value is None:
        return []
    if isinstance(value, dict):
        if "edges" in value:
            return [edge.get("node") for edge in value.get("edges") or [] if edge and edge.get("node") is not None]
        if "nodes" in value:
            return [node for node in value.get("nodes") or [] if node is not None]
        return []
    return [item for item in value if item is not None]


def first_present(subject: T, providers: Sequence[Callable[[T], Optional[str]]]) -> Optional[str]:
    """Run providers in order and return the first non-empty result."""

    for provider in providers:
        value = provider(subject)
        if value:
            return value
    return None
