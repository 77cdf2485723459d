"""Quick notes API endpoint.

GET /api/notes - List notes, pinned first
POST /api/notes - Create a note
DELETE /api/notes/{note_id} - Delete a note
POST /api/notes/{note_id}/pin - Toggle the pinned flag
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response

from kore.api.app import get_current_user_id, get_db_session
from kore.core.errors import NotFoundError
from kore.db.repo import DbSession
from kore.journal import goals_notes as journal
from kore.models.domain import NoteEntity
from kore.models.types import NoteCreate, NoteDetail

router = APIRouter()


def _build_note_detail(note: NoteEntity) -> NoteDetail:
    return NoteDetail(
        note_id=note.note_id,
        content=note.content,
        note_type=note.note_type,
        pinned=note.pinned,
        created_at=note.created_at,
    )


@router.get("/notes", response_model=list[NoteDetail])
def list_notes(
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> list[NoteDetail]:
    return [_build_note_detail(n) for n in journal.list_notes(session, user_id)]


@router.post("/notes", response_model=NoteDetail, status_code=201)
def create_note(
    payload: NoteCreate,
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> NoteDetail:
    note = journal.create_note(session, user_id, payload.content, payload.note_type)
    return _build_note_detail(note)


@router.post("/notes/{note_id}/pin", response_model=NoteDetail)
def toggle_pin(
    note_id: str,
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> NoteDetail:
    try:
        note = journal.toggle_pin(session, user_id, note_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    return _build_note_detail(note)


@router.delete("/notes/{note_id}", status_code=204)
def delete_note(
    note_id: str,
    session: DbSession = Depends(get_db_session),
    user_id: str = Depends(get_current_user_id),
) -> Response:
    try:
        journal.delete_note(session, user_id, note_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    return Response(status_code=204)
