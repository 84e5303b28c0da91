"""Section and entry endpoints."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from cms.container import Application
from cms.http.problem import problem_response
from cms.models.section import HANDLE_PATTERN
from cms.routes.deps import get_cms

router = APIRouter()
logger = logging.getLogger(__name__)


class SectionIn(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    handle: str = Field(min_length=1, max_length=50, pattern=HANDLE_PATTERN)


class EntryIn(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    language: str = Field(default="en_us", min_length=2, max_length=12)
    author_id: Optional[int] = None


@router.get("/api/v1/sections", summary="List sections", operation_id="listSections")
def list_sections(cms: Application = Depends(get_cms)):
    return {"sections": [s.model_dump() for s in cms.sections.get_all_sections()]}


@router.post("/api/v1/sections", status_code=201, summary="Create a section and its content table", operation_id="createSection")
def create_section(body: SectionIn, cms: Application = Depends(get_cms)):
    if cms.sections.get_section_by_handle(body.handle) is not None:
        return problem_response(409, "Section already exists", f"A section with handle {body.handle!r} exists")
    section = cms.sections.save_section(body.name, body.handle)
    return section.model_dump()


@router.post(
    "/api/v1/sections/{handle}/entries",
    status_code=201,
    summary="Create an entry with content in one language",
    operation_id="createEntry",
)
def create_entry(handle: str, body: EntryIn, cms: Application = Depends(get_cms)):
    section = cms.sections.get_section_by_handle(handle)
    if section is None:
        return problem_response(404, "Section not found", f"No section with handle {handle!r}")
    entry = cms.entries.save_entry(section, body.title, language=body.language, author_id=body.author_id)
    return entry.model_dump(mode="json")
