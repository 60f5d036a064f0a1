"""Schedule Routes — create from a prompt, query, update, delete.

Invariants:
    - Caller scope: authenticated → own schedules only; anonymous → all schedules
      (anonymous creations are stored with user_id NULL)
    - POST persists only a fully validated extraction; extraction errors propagate
      to the global handler and nothing is written
    - priority stored as "medium" when the extraction omitted it
    - Static paths (/date-range, /type/...) registered before /{schedule_id}

Design Decisions:
    - get_schedule_or_404 shared by read/update/delete
    - ai_response stores the accepted extraction as JSON, not the raw model text
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_optional_user, get_schedule_extractor
from app.core.domain_types import DEFAULT_PRIORITY, ScheduleType
from app.core.errors import ResourceNotFoundError
from app.infrastructure.database import get_db
from app.models.schedule import Schedule
from app.models.user import User
from app.schemas.schedule import (
    DATE_PATTERN,
    Pagination,
    ScheduleCreate,
    ScheduleListResponse,
    ScheduleQueryResponse,
    ScheduleResponse,
    ScheduleUpdate,
)
from app.services.schedule_extractor import ScheduleExtractor

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/schedules", tags=["schedules"])


def _scoped(query, user: User | None):
    """Restrict a Schedule query to the caller's own rows when authenticated."""
    if user is not None:
        query = query.where(Schedule.user_id == user.id)
    return query


def schedule_to_response(schedule: Schedule) -> ScheduleResponse:
    return ScheduleResponse(
        id=schedule.id,
        user_id=schedule.user_id,
        type=schedule.type,
        title=schedule.title,
        description=schedule.description,
        date=schedule.date,
        time=schedule.time,
        duration=schedule.duration,
        participants=schedule.participants,
        location=schedule.location,
        priority=schedule.priority,
        category=schedule.category,
        metadata=schedule.metadata_,
        ai_prompt=schedule.ai_prompt,
        formatted_date_time=schedule.formatted_date_time,
        created_at=schedule.created_at,
        updated_at=schedule.updated_at,
    )


async def get_schedule_or_404(
    schedule_id: UUID, db: AsyncSession, user: User | None,
) -> Schedule:
    """Get a schedule visible to the caller or raise 404."""
    result = await db.execute(
        _scoped(select(Schedule).where(Schedule.id == schedule_id), user),
    )
    schedule = result.scalar_one_or_none()
    if not schedule:
        raise ResourceNotFoundError("Schedule", str(schedule_id))
    return schedule


@router.post(
    "", response_model=ScheduleResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_schedule(
    body: ScheduleCreate,
    db: AsyncSession = Depends(get_db),
    user: User | None = Depends(get_optional_user),
    extractor: ScheduleExtractor = Depends(get_schedule_extractor),
):
    """Extract a schedule from a natural-language prompt and store it."""
    extraction = await extractor.extract(body.prompt)
    schedule = Schedule(
        user_id=user.id if user else None,
        type=extraction.type.value,
        title=extraction.title,
        description=extraction.description,
        date=extraction.date,
        time=extraction.time,
        duration=extraction.duration,
        participants=extraction.participants,
        location=extraction.location,
        priority=(extraction.priority or DEFAULT_PRIORITY).value,
        category=extraction.category,
        metadata_=extraction.metadata,
        ai_prompt=body.prompt,
        ai_response=extraction.model_dump_json(exclude_none=True),
    )
    db.add(schedule)
    await db.commit()
    await db.refresh(schedule)
    logger.info(
        "Schedule created",
        extra={
            "schedule_id": str(schedule.id),
            "schedule_type": schedule.type,
            "user_id": str(user.id) if user else None,
        },
    )
    return schedule_to_response(schedule)


@router.get("", response_model=ScheduleListResponse)
async def list_schedules(
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    user: User | None = Depends(get_optional_user),
):
    """List schedules, newest first, with pagination."""
    query = _scoped(select(Schedule), user).order_by(
        Schedule.created_at.desc(),
    )
    result = await db.execute(query.limit(limit).offset(offset))
    schedules = result.scalars().all()

    total = await db.scalar(
        _scoped(select(func.count()).select_from(Schedule), user),
    )
    return ScheduleListResponse(
        schedules=[schedule_to_response(s) for s in schedules],
        pagination=Pagination(limit=limit, offset=offset, total=total or 0),
    )


@router.get("/date-range", response_model=ScheduleQueryResponse)
async def list_schedules_by_date_range(
    start_date: str = Query(..., pattern=DATE_PATTERN),
    end_date: str = Query(..., pattern=DATE_PATTERN),
    db: AsyncSession = Depends(get_db),
    user: User | None = Depends(get_optional_user),
):
    """Schedules whose date falls in [start_date, end_date], by date then time."""
    query = _scoped(
        select(Schedule).where(
            Schedule.date >= start_date, Schedule.date <= end_date,
        ),
        user,
    ).order_by(Schedule.date, Schedule.time)
    result = await db.execute(query)
    schedules = result.scalars().all()
    return ScheduleQueryResponse(
        schedules=[schedule_to_response(s) for s in schedules],
        count=len(schedules),
    )


@router.get("/type/{schedule_type}", response_model=ScheduleQueryResponse)
async def list_schedules_by_type(
    schedule_type: ScheduleType,
    db: AsyncSession = Depends(get_db),
    user: User | None = Depends(get_optional_user),
):
    """Schedules of one type, by date then time."""
    query = _scoped(
        select(Schedule).where(Schedule.type == schedule_type.value), user,
    ).order_by(Schedule.date, Schedule.time)
    result = await db.execute(query)
    schedules = result.scalars().all()
    return ScheduleQueryResponse(
        schedules=[schedule_to_response(s) for s in schedules],
        count=len(schedules),
    )


@router.get("/{schedule_id}", response_model=ScheduleResponse)
async def get_schedule(
    schedule_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User | None = Depends(get_optional_user),
):
    """Get one schedule."""
    schedule = await get_schedule_or_404(schedule_id, db, user)
    return schedule_to_response(schedule)


@router.put("/{schedule_id}", response_model=ScheduleResponse)
async def update_schedule(
    schedule_id: UUID,
    body: ScheduleUpdate,
    db: AsyncSession = Depends(get_db),
    user: User | None = Depends(get_optional_user),
):
    """Apply a partial update; unspecified fields keep their values."""
    schedule = await get_schedule_or_404(schedule_id, db, user)
    changes = body.model_dump(mode="json", exclude_unset=True)
    if "metadata" in changes:
        changes["metadata_"] = changes.pop("metadata")
    for name, value in changes.items():
        setattr(schedule, name, value)
    await db.commit()
    await db.refresh(schedule)
    logger.info(
        f"Schedule updated: {sorted(changes)}",
        extra={"schedule_id": str(schedule.id)},
    )
    return schedule_to_response(schedule)


@router.delete("/{schedule_id}")
async def delete_schedule(
    schedule_id: UUID,
    db: AsyncSession = Depends(get_db),
    user: User | None = Depends(get_optional_user),
):
    """Delete one schedule."""
    schedule = await get_schedule_or_404(schedule_id, db, user)
    await db.delete(schedule)
    await db.commit()
    logger.info("Schedule deleted", extra={"schedule_id": str(schedule_id)})
    return {"message": "Schedule deleted successfully", "id": str(schedule_id)}
