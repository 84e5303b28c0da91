from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Entry(BaseModel):
    """An entry with the content row for one language."""

    model_config = ConfigDict(frozen=True)

    id: int
    section_id: int
    title: str
    language: str
    author_id: Optional[int] = None
    post_date: Optional[datetime] = None
    enabled: bool = True


__all__ = ["Entry"]
