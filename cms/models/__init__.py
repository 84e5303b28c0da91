"""Domain models: sections, entries and per-section content tables."""

from cms.models.entry import Entry
from cms.models.entry_content import EntryContentRecord
from cms.models.section import Section

__all__ = ["Entry", "EntryContentRecord", "Section"]
