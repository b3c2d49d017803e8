"""Study API router: graded reviews, session queues, practice and previews."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from tango.models import (
    CardState,
    DueCountResponse,
    DueWordsResponse,
    PracticeResultRequest,
    PracticeWordsResponse,
    PreviewResponse,
    ReviewRequest,
    ReviewResponse,
    StudyItem,
    WordResponse,
)
from tango.repositories import ConcurrencyConflictError, WordNotFoundError
from tango.routers.deps import get_date_key, get_user_id
from tango.services import get_study_service
from tango.srs.errors import InvalidConfigurationError, InvalidRatingError
from tango.srs.rating import rating_from_quality

router = APIRouter(prefix="/study", tags=["study"])

UserId = Annotated[str, Depends(get_user_id)]
DateKey = Annotated[str, Depends(get_date_key)]


def _not_found(word_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Word with ID {word_id} not found",
    )


@router.get("/due", response_model=DueWordsResponse)
async def get_due_words(
    user_id: UserId,
    date_key: DateKey,
    limit: int | None = Query(None, ge=0, le=500, description="Defaults to the session size"),
) -> DueWordsResponse:
    """Ordered queue for the next graded session."""
    items = get_study_service().get_due_words(user_id, date_key, limit)
    return DueWordsResponse(
        items=[
            StudyItem(word=WordResponse(**item.word.model_dump()), progress=item.progress)
            for item in items
        ],
        count=len(items),
    )


@router.get("/due/count", response_model=DueCountResponse)
async def get_due_count(user_id: UserId, date_key: DateKey) -> DueCountResponse:
    """Number of words available to study today."""
    return DueCountResponse(count=get_study_service().get_due_count(user_id, date_key))


@router.get("/practice", response_model=PracticeWordsResponse)
async def get_practice_words(
    user_id: UserId,
    count: int | None = Query(None, ge=0, le=500, description="Defaults to the session size"),
) -> PracticeWordsResponse:
    """Random weighted words for ungraded practice."""
    words = get_study_service().get_practice_words(user_id, count)
    return PracticeWordsResponse(
        words=[WordResponse(**word.model_dump()) for word in words],
        count=len(words),
    )


@router.post("/practice/{word_id}", status_code=status.HTTP_204_NO_CONTENT)
async def record_practice(
    word_id: str,
    request: PracticeResultRequest,
    user_id: UserId,
    date_key: DateKey,
) -> None:
    """Count an ungraded practice answer. Card state is not touched."""
    try:
        get_study_service().record_practice(user_id, word_id, request.known, date_key)
    except WordNotFoundError:
        raise _not_found(word_id)


@router.get("/preview/{word_id}", response_model=PreviewResponse)
async def preview_word(word_id: str, user_id: UserId) -> PreviewResponse:
    """Next interval for each rating, as shown on the answer buttons."""
    try:
        preview = get_study_service().preview(user_id, word_id)
    except WordNotFoundError:
        raise _not_found(word_id)
    return PreviewResponse(wordId=word_id, **preview.model_dump())


@router.post("/review", response_model=ReviewResponse)
async def submit_review(request: ReviewRequest, user_id: UserId, date_key: DateKey) -> ReviewResponse:
    """Rate a word and schedule its next review."""
    try:
        rating = request.rating if request.rating is not None else rating_from_quality(request.quality)
        result = get_study_service().record_review(user_id, request.wordId, rating, date_key)
    except (InvalidRatingError, InvalidConfigurationError) as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except WordNotFoundError:
        raise _not_found(request.wordId)
    except ConcurrencyConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return ReviewResponse(
        progress=result.progress,
        wasNew=result.was_new,
        becameLeech=result.became_leech,
        newAchievements=result.new_achievements,
    )


@router.get("/progress/{word_id}", response_model=CardState | None)
async def get_progress(word_id: str, user_id: UserId) -> CardState | None:
    """Stored card state of a word (null when it has never been rated)."""
    try:
        return get_study_service().get_progress(user_id, word_id)
    except WordNotFoundError:
        raise _not_found(word_id)
