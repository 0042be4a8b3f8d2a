"""
api/routes/flashcards.py -- Flashcard REST endpoints.

Routes:
  GET    /api/flashcards[?folder_id=]  -- caller's flashcards, optionally one folder
  POST   /api/flashcards               -- create a flashcard in an owned folder
  PUT    /api/flashcards/{id}          -- replace front/back text
  DELETE /api/flashcards/{id}          -- delete a flashcard
  PATCH  /api/flashcards/{id}/move     -- move to another owned folder

Every route requires a session token.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_study_service
from api.models import (
    FlashcardCreate,
    FlashcardListResponse,
    FlashcardMove,
    FlashcardOut,
    FlashcardResponse,
    FlashcardUpdate,
    MessageResponse,
)
from auth.dependencies import get_current_user_id
from study.service import StudyService

router = APIRouter()


@router.get("/flashcards", response_model=FlashcardListResponse)
def list_flashcards(
    folder_id: Optional[int] = Query(None),
    user_id: int = Depends(get_current_user_id),
    study: StudyService = Depends(get_study_service),
) -> FlashcardListResponse:
    """Newest first. A folder_id the caller does not own simply yields an empty list."""
    cards = study.list_flashcards(user_id, folder_id=folder_id)
    return FlashcardListResponse(flashcards=[FlashcardOut.from_flashcard(c) for c in cards])


@router.post("/flashcards", response_model=FlashcardResponse, status_code=201)
def create_flashcard(
    body: FlashcardCreate,
    user_id: int = Depends(get_current_user_id),
    study: StudyService = Depends(get_study_service),
) -> FlashcardResponse:
    card = study.create_flashcard(user_id, body.folder_id, body.front_text, body.back_text)
    return FlashcardResponse(flashcard=FlashcardOut.from_flashcard(card))


@router.put("/flashcards/{card_id}", response_model=FlashcardResponse)
def update_flashcard(
    card_id: int,
    body: FlashcardUpdate,
    user_id: int = Depends(get_current_user_id),
    study: StudyService = Depends(get_study_service),
) -> FlashcardResponse:
    card = study.update_flashcard(user_id, card_id, body.front_text, body.back_text)
    return FlashcardResponse(flashcard=FlashcardOut.from_flashcard(card))


@router.delete("/flashcards/{card_id}", response_model=MessageResponse)
def delete_flashcard(
    card_id: int,
    user_id: int = Depends(get_current_user_id),
    study: StudyService = Depends(get_study_service),
) -> MessageResponse:
    study.delete_flashcard(user_id, card_id)
    return MessageResponse(message="Flashcard deleted successfully")


@router.patch("/flashcards/{card_id}/move", response_model=FlashcardResponse)
def move_flashcard(
    card_id: int,
    body: FlashcardMove,
    user_id: int = Depends(get_current_user_id),
    study: StudyService = Depends(get_study_service),
) -> FlashcardResponse:
    card = study.move_flashcard(user_id, card_id, body.folder_id)
    return FlashcardResponse(flashcard=FlashcardOut.from_flashcard(card))
