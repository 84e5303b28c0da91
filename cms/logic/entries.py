"""Entry persistence: the entry row, its localized content and its index."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from sqlalchemy import insert

from cms.helpers import utcnow
from cms.logic.events import EVENT_AFTER_SAVE_ENTRY, EVENT_BEFORE_SAVE_ENTRY
from cms.models.entry import Entry
from cms.models.entry_content import EntryContentRecord
from cms.models.section import Section

if TYPE_CHECKING:
    from cms.container import Application

logger = logging.getLogger(__name__)


class EntriesService:
    def __init__(self, app: "Application") -> None:
        self.app = app

    def save_entry(
        self,
        section: Section,
        title: str,
        *,
        language: str = "en_us",
        author_id: Optional[int] = None,
    ) -> Entry:
        self.app.events.trigger(self, EVENT_BEFORE_SAVE_ENTRY, section=section, title=title)
        db = self.app.db
        post_date = utcnow()
        with db.begin() as conn:
            result = conn.execute(
                insert(db.schema.entries).values(
                    sectionId=section.id, authorId=author_id, postDate=post_date, enabled=True
                )
            )
            entry_id = int(result.inserted_primary_key[0])
            EntryContentRecord(section, schema=db.schema).insert_content(
                conn, entry_id=entry_id, language=language, title=title
            )
        self.app.search.index_attribute(entry_id, "title", title, locale=language)

        entry = Entry(
            id=entry_id,
            section_id=int(section.id or 0),
            title=title,
            language=language,
            author_id=author_id,
            post_date=post_date,
        )
        logger.info("entry_saved id=%s section=%s language=%s", entry.id, section.handle, language)
        self.app.events.trigger(self, EVENT_AFTER_SAVE_ENTRY, entry=entry)
        return entry

    def get_entry_content(self, section: Section, entry_id: int, language: str = "en_us") -> Optional[Dict[str, Any]]:
        db = self.app.db
        with db.begin() as conn:
            return EntryContentRecord(section, schema=db.schema).find_content(conn, entry_id, language)


__all__ = ["EntriesService"]
