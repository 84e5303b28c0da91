"""Small shared helpers."""

from __future__ import annotations

from datetime import datetime, timezone
from importlib import import_module
from typing import Any

from cms.errors import InvalidConfigError


def import_string(path: str) -> Any:
    """Import an object from a ``module:attr`` or dotted ``module.attr`` path."""
    path = (path or "").strip()
    if ":" in path:
        module_name, _, attr = path.partition(":")
    else:
        module_name, _, attr = path.rpartition(".")
    if not module_name or not attr:
        raise InvalidConfigError(f"Invalid import path: {path!r}")
    try:
        module = import_module(module_name)
    except ImportError as exc:
        raise InvalidConfigError(f"Cannot import module {module_name!r}: {exc}") from exc
    obj: Any = module
    for part in attr.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError:
            raise InvalidConfigError(f"Module {module_name!r} has no attribute {attr!r}") from None
    return obj


def qualified_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def utcnow() -> datetime:
    # Naive UTC; DateTime columns are stored without a zone
    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


__all__ = ["import_string", "qualified_name", "utcnow"]
