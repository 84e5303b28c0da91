"""Section persistence. Saving a section also creates its content table."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import delete, insert, select

from cms.logic.events import (
    EVENT_AFTER_DELETE_SECTION,
    EVENT_AFTER_SAVE_SECTION,
    EVENT_BEFORE_SAVE_SECTION,
)
from cms.models.entry_content import EntryContentRecord
from cms.models.section import Section

if TYPE_CHECKING:
    from cms.container import Application

logger = logging.getLogger(__name__)


class SectionsService:
    def __init__(self, app: "Application") -> None:
        self.app = app

    def get_all_sections(self) -> List[Section]:
        db = self.app.db
        t = db.schema.sections
        with db.begin() as conn:
            rows = conn.execute(select(t.c.id, t.c.name, t.c.handle).order_by(t.c.id)).mappings().all()
        return [Section(**row) for row in rows]

    def get_section_by_handle(self, handle: str) -> Optional[Section]:
        db = self.app.db
        t = db.schema.sections
        with db.begin() as conn:
            row = conn.execute(
                select(t.c.id, t.c.name, t.c.handle).where(t.c.handle == handle)
            ).mappings().first()
        return Section(**row) if row else None

    def content_record(self, section: Section) -> EntryContentRecord:
        return EntryContentRecord(section, schema=self.app.db.schema)

    def save_section(self, name: str, handle: str) -> Section:
        section = Section(name=name, handle=handle)
        self.app.events.trigger(self, EVENT_BEFORE_SAVE_SECTION, section=section)
        db = self.app.db
        with db.begin() as conn:
            result = conn.execute(insert(db.schema.sections).values(name=section.name, handle=section.handle))
            section = section.model_copy(update={"id": int(result.inserted_primary_key[0])})
            record = self.content_record(section)
            record.create_table(conn)
            record.add_foreign_keys(conn)
        logger.info("section_saved id=%s handle=%s", section.id, section.handle)
        self.app.events.trigger(self, EVENT_AFTER_SAVE_SECTION, section=section)
        return section

    def delete_section(self, handle: str) -> bool:
        section = self.get_section_by_handle(handle)
        if section is None:
            return False
        db = self.app.db
        with db.begin() as conn:
            record = self.content_record(section)
            record.drop_foreign_keys(conn)
            record.drop_table(conn)
            conn.execute(delete(db.schema.sections).where(db.schema.sections.c.id == section.id))
        logger.info("section_deleted id=%s handle=%s", section.id, section.handle)
        self.app.events.trigger(self, EVENT_AFTER_DELETE_SECTION, section=section)
        return True


__all__ = ["SectionsService"]
