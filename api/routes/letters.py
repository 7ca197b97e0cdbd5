"""Letter listing endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from api.deps import get_store
from api.schemas.emotions import LetterListResponse, LetterResponse, letter_to_response
from services.store import EmotionStore

router = APIRouter(prefix="/letters", tags=["letters"])

Store = Annotated[EmotionStore, Depends(get_store)]


@router.get("", response_model=LetterListResponse)
def list_letters(
    store: Store,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> LetterListResponse:
    """Most recent letters, newest first."""
    letters = store.list_letters(limit=limit)
    return LetterListResponse(
        entries=[letter_to_response(letter) for letter in letters], total=len(letters)
    )


@router.get("/{letter_id}", response_model=LetterResponse)
def get_letter(letter_id: str, store: Store) -> LetterResponse:
    """Fetch a single letter by ID."""
    letter = store.get_letter(letter_id)
    if letter is None:
        raise HTTPException(status_code=404, detail=f"Letter not found: {letter_id!r}")
    return letter_to_response(letter)
