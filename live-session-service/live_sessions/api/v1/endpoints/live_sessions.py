# live_sessions/api/v1/endpoints/live_sessions.py
from datetime import datetime
from math import ceil
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from live_sessions.api import deps
from live_sessions.core.config import settings
from live_sessions.core.kafka_producer import get_kafka_producer
from live_sessions.crud import live_session as crud_live_session
from live_sessions.db.session import get_db
from live_sessions.schemas.live_session import (
    EndSessionRequest,
    LiveSession as LiveSessionSchema,
    LiveSessionCreate,
    LiveSessionDetail,
    LiveSessionFilters,
    LiveSessionPage,
    LiveSessionSummary,
    LiveSessionUpdate,
    Pagination,
    StartSessionRequest,
)
from live_sessions.schemas.token import TokenPayload
from live_sessions.services.lifecycle import lifecycle_service

router = APIRouter(prefix="/live-sessions", tags=["Live Sessions"])


@router.post("", response_model=LiveSessionSchema, status_code=status.HTTP_201_CREATED)
def create_live_session(
    session_in: LiveSessionCreate,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
    producer=Depends(get_kafka_producer),
):
    """Schedule a new live session. Requires an instructor role."""
    return lifecycle_service.create_session(
        db, obj_in=session_in, actor=current_user, producer=producer
    )


@router.get("", response_model=LiveSessionPage)
def list_live_sessions(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    category: Optional[str] = None,
    language: Optional[str] = None,
    instructor_id: Optional[str] = None,
    search: Optional[str] = None,
    scheduled_from: Optional[datetime] = None,
    scheduled_to: Optional[datetime] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """List sessions with filtering and page/limit pagination."""
    try:
        filters = LiveSessionFilters(
            status=status_filter,
            category=category,
            language=language,
            instructor_id=instructor_id,
            search=search,
            scheduled_from=scheduled_from,
            scheduled_to=scheduled_to,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    items, total = crud_live_session.get_multi_filtered(
        db, filters=filters, skip=(page - 1) * limit, limit=limit
    )
    pages = ceil(total / limit) if total else 0
    return LiveSessionPage(
        items=[LiveSessionSummary.model_validate(item) for item in items],
        pagination=Pagination(
            current=page,
            pages=pages,
            total=total,
            has_next=page < pages,
            has_prev=page > 1,
        ),
    )


@router.get("/me", response_model=List[LiveSessionSummary])
def list_my_live_sessions(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Sessions the current user is registered for."""
    try:
        filters = LiveSessionFilters(status=status_filter)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return crud_live_session.get_multi_by_participant(
        db, user_id=current_user.sub, status=filters.status
    )


@router.get("/{session_id}", response_model=LiveSessionDetail)
def get_live_session(
    session_id: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    live_session = crud_live_session.get_required(db, session_id)
    # LiveSession.is_registered is a method, so it is set explicitly here
    return LiveSessionDetail(
        **LiveSessionSchema.model_validate(live_session).model_dump(),
        is_registered=live_session.is_registered(current_user.sub),
    )


@router.patch("/{session_id}", response_model=LiveSessionSchema)
def update_live_session(
    session_id: str,
    session_in: LiveSessionUpdate,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Edit a session that has not started yet."""
    return lifecycle_service.update_session(
        db, session_id=session_id, obj_in=session_in, actor=current_user
    )


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_live_session(
    session_id: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
    producer=Depends(get_kafka_producer),
):
    """Delete a session. Live sessions and completed sessions with participants are kept."""
    lifecycle_service.delete_session(
        db, session_id=session_id, actor=current_user, producer=producer
    )


@router.post("/{session_id}/start", response_model=LiveSessionSchema)
def start_live_session(
    session_id: str,
    body: Optional[StartSessionRequest] = None,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
    producer=Depends(get_kafka_producer),
):
    return lifecycle_service.start(
        db,
        session_id=session_id,
        actor=current_user,
        meeting_link=body.meeting_link if body else None,
        producer=producer,
    )


@router.post("/{session_id}/end", response_model=LiveSessionSchema)
def end_live_session(
    session_id: str,
    body: Optional[EndSessionRequest] = None,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
    producer=Depends(get_kafka_producer),
):
    """End a live session and settle attendance."""
    return lifecycle_service.end(
        db,
        session_id=session_id,
        actor=current_user,
        recording_url=body.recording_url if body else None,
        producer=producer,
    )


@router.post("/{session_id}/cancel", response_model=LiveSessionSchema)
def cancel_live_session(
    session_id: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
    producer=Depends(get_kafka_producer),
):
    return lifecycle_service.cancel(
        db, session_id=session_id, actor=current_user, producer=producer
    )
