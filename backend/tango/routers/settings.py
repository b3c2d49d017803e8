"""Quiz settings and daily statistics routers."""

from typing import Annotated

from fastapi import APIRouter, Depends

from tango.models import (
    AchievementListResponse,
    DailyStats,
    QuizSettings,
    QuizSettingsUpdate,
    StatsSummaryResponse,
)
from tango.repositories import get_study_repository
from tango.routers.deps import get_date_key, get_user_id
from tango.services import get_study_service
from tango.srs.stats import empty_stats

router = APIRouter(prefix="/settings", tags=["settings"])
stats_router = APIRouter(prefix="/stats", tags=["stats"])

UserId = Annotated[str, Depends(get_user_id)]
DateKey = Annotated[str, Depends(get_date_key)]


@router.get("/quiz", response_model=QuizSettings)
async def get_quiz_settings(user_id: UserId) -> QuizSettings:
    """Current quiz settings (defaults until the user changes them)."""
    return get_study_repository().get_quiz_settings(user_id)


@router.put("/quiz", response_model=QuizSettings)
async def update_quiz_settings(update: QuizSettingsUpdate, user_id: UserId) -> QuizSettings:
    """Change some quiz settings. Send null for a filter to clear it."""
    return get_study_repository().update_quiz_settings(user_id, update)


@stats_router.get("/today", response_model=DailyStats)
async def get_today_stats(user_id: UserId, date_key: DateKey) -> DailyStats:
    """Counters for the user's current local day."""
    return get_study_repository().get_daily_stats(user_id, date_key) or empty_stats(user_id, date_key)


@stats_router.get("/summary", response_model=StatsSummaryResponse)
async def get_stats_summary(user_id: UserId, date_key: DateKey) -> StatsSummaryResponse:
    """Today's counters with accuracy, streak and due count."""
    summary = get_study_service().get_summary(user_id, date_key)
    return StatsSummaryResponse(
        today=summary.today,
        accuracy=summary.accuracy,
        streakDays=summary.streak_days,
        dueCount=summary.due_count,
    )


@stats_router.get("/achievements", response_model=AchievementListResponse)
async def get_achievements(user_id: UserId) -> AchievementListResponse:
    """Unlocked achievements, most recent first."""
    achievements = get_study_service().get_achievements(user_id)
    return AchievementListResponse(achievements=achievements, count=len(achievements))
