"""Section model.

A section groups entries; its handle is a short identifier that also names
the section's content table, so it must be a safe SQL identifier fragment.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

HANDLE_PATTERN = r"^[A-Za-z][A-Za-z0-9_]*$"


class Section(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    name: str = Field(min_length=1, max_length=255)
    handle: str = Field(min_length=1, max_length=50, pattern=HANDLE_PATTERN)


__all__ = ["HANDLE_PATTERN", "Section"]
