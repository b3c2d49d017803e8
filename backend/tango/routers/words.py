"""Words API router."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel

from tango.models import WordCreate, WordListResponse, WordResponse
from tango.repositories import ConcurrencyConflictError, WordNotFoundError, get_study_repository
from tango.routers.deps import get_date_key, get_user_id
from tango.services import get_study_service
from tango.srs.leech import clear_leech

router = APIRouter(prefix="/words", tags=["words"])

UserId = Annotated[str, Depends(get_user_id)]


class MasteredRequest(BaseModel):
    """Request for PUT /words/{word_id}/mastered."""

    mastered: bool
    inSession: bool = False


def _not_found(word_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Word with ID {word_id} not found",
    )


@router.post("", response_model=WordResponse, status_code=status.HTTP_201_CREATED)
async def create_word(word_create: WordCreate, user_id: UserId) -> WordResponse:
    """Add a word to the user's list."""
    word = get_study_repository().create_word(user_id, word_create)
    return WordResponse(**word.model_dump())


@router.get("", response_model=WordListResponse)
async def list_words(
    user_id: UserId,
    include_mastered: bool = Query(True, alias="includeMastered"),
) -> WordListResponse:
    """List the user's words, newest first."""
    words = get_study_repository().list_words(user_id, include_mastered=include_mastered)
    return WordListResponse(
        words=[WordResponse(**word.model_dump()) for word in words],
        count=len(words),
    )


@router.get("/{word_id}", response_model=WordResponse)
async def get_word(word_id: str, user_id: UserId) -> WordResponse:
    """Get a specific word by ID."""
    try:
        word = get_study_repository().get_word(user_id, word_id)
    except WordNotFoundError:
        raise _not_found(word_id)
    return WordResponse(**word.model_dump())


@router.delete("/{word_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_word(word_id: str, user_id: UserId) -> Response:
    """Delete a word together with its card state."""
    try:
        get_study_repository().delete_word(user_id, word_id)
    except WordNotFoundError:
        raise _not_found(word_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{word_id}/mastered", response_model=WordResponse)
async def set_mastered(
    word_id: str,
    request: MasteredRequest,
    user_id: UserId,
    date_key: Annotated[str, Depends(get_date_key)],
) -> WordResponse:
    """Mark a word as mastered (it leaves all study queues) or bring it back."""
    try:
        word = get_study_service().set_mastered(
            user_id, word_id, request.mastered, date_key, in_session=request.inSession
        )
    except WordNotFoundError:
        raise _not_found(word_id)
    except ConcurrencyConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return WordResponse(**word.model_dump())


@router.delete("/{word_id}/leech", response_model=WordResponse)
async def clear_word_leech(word_id: str, user_id: UserId) -> WordResponse:
    """Clear the leech flag after the user has dealt with the word."""
    repo = get_study_repository()
    try:
        word = repo.update_word(user_id, word_id, clear_leech)
    except WordNotFoundError:
        raise _not_found(word_id)
    except ConcurrencyConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return WordResponse(**word.model_dump())
