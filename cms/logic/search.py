"""Search index writes and lookups.

Keywords are stored normalized: lower-case, whitespace collapsed and padded
with a single space on each side so whole-word matches can use LIKE.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import delete, insert, select

if TYPE_CHECKING:
    from cms.container import Application

logger = logging.getLogger(__name__)

_WS = re.compile(r"\s+")


def normalize_keywords(keywords: str) -> str:
    collapsed = _WS.sub(" ", (keywords or "").strip().lower())
    return f" {collapsed} " if collapsed else ""


class SearchService:
    def __init__(self, app: "Application") -> None:
        self.app = app

    def index_attribute(
        self,
        element_id: int,
        attribute: str,
        keywords: str,
        *,
        locale: str = "en_us",
        field_id: int = 0,
    ) -> None:
        db = self.app.db
        t = db.schema.searchindex
        with db.begin() as conn:
            conn.execute(
                delete(t).where(
                    t.c.elementId == element_id,
                    t.c.attribute == attribute,
                    t.c.fieldId == field_id,
                    t.c.locale == locale,
                )
            )
            conn.execute(
                insert(t).values(
                    elementId=element_id,
                    attribute=attribute,
                    fieldId=field_id,
                    locale=locale,
                    keywords=normalize_keywords(keywords),
                )
            )
        logger.debug("search_indexed element_id=%s attribute=%s locale=%s", element_id, attribute, locale)

    def search(self, term: str, *, locale: Optional[str] = None) -> List[int]:
        """Return element ids whose keywords contain the normalized term."""
        needle = normalize_keywords(term).strip()
        if not needle:
            return []
        db = self.app.db
        t = db.schema.searchindex
        query = select(t.c.elementId).where(t.c.keywords.like(f"%{needle}%"))
        if locale:
            query = query.where(t.c.locale == locale)
        with db.begin() as conn:
            rows = conn.execute(query.distinct().order_by(t.c.elementId)).all()
        return [int(r[0]) for r in rows]

    def element_ids(self) -> List[int]:
        db = self.app.db
        t = db.schema.searchindex
        with db.begin() as conn:
            rows = conn.execute(select(t.c.elementId).distinct().order_by(t.c.elementId)).all()
        return [int(r[0]) for r in rows]


__all__ = ["SearchService", "normalize_keywords"]
