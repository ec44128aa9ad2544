"""
End-to-end walk through one session's life.

Three visitors race for two seats, the instructor runs the session, two
attendees rate it, and the completed session refuses to be deleted.
"""

import threading
from unittest.mock import MagicMock

import pytest
from sqlalchemy.orm import Session

from live_sessions.constants.session import ParticipantStatus, SessionStatus
from live_sessions.core.exceptions import HasAttendees, SessionFull
from live_sessions.crud import live_session as crud_live_session
from live_sessions.schemas.live_session import LiveSessionCreate
from live_sessions.services.attendance import attendance_service
from live_sessions.services.feedback_aggregator import feedback_aggregator
from live_sessions.services.lifecycle import LiveSessionLifecycleService
from live_sessions.services.registrar import registration_service
from tests.utils.live_session import in_future, make_actor


def test_full_session_lifecycle(db_session: Session, session_factory, kafka_producer):
    lifecycle = LiveSessionLifecycleService(catalog=MagicMock())
    instructor = make_actor("instructor_1")

    live = lifecycle.create_session(
        db_session,
        obj_in=LiveSessionCreate(
            title="Hieroglyphs for Beginners",
            category="workshop",
            scheduled_at=in_future(),
            duration_minutes=45,
            max_participants=2,
        ),
        actor=instructor,
        producer=kafka_producer,
    )

    # Three registrants, two seats
    barrier = threading.Barrier(3)
    outcomes = {}

    def register(user_id):
        db = session_factory()
        try:
            barrier.wait()
            registration_service.register(db, session_id=live.id, user_id=user_id)
            outcomes[user_id] = "registered"
        except SessionFull:
            outcomes[user_id] = "full"
        finally:
            db.close()

    threads = [threading.Thread(target=register, args=(u,)) for u in ("ada", "ben", "cleo")]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert sorted(outcomes.values()) == ["full", "registered", "registered"]
    seated = [u for u, outcome in outcomes.items() if outcome == "registered"]

    lifecycle.start(db_session, session_id=live.id, actor=instructor, producer=kafka_producer)
    for user_id in seated:
        attendance_service.mark_joined(db_session, session_id=live.id, user_id=user_id)
    ended = lifecycle.end(db_session, session_id=live.id, actor=instructor, producer=kafka_producer)

    assert ended.status == SessionStatus.COMPLETED
    assert all(p.status == ParticipantStatus.ATTENDED for p in ended.participants)
    assert all(p.left_at is not None for p in ended.participants)

    feedback_aggregator.submit_feedback(db_session, session_id=live.id, user_id=seated[0], rating=5)
    result = feedback_aggregator.submit_feedback(
        db_session, session_id=live.id, user_id=seated[1], rating=3
    )
    assert result.average_rating == 4.0
    assert result.feedback_count == 2

    with pytest.raises(HasAttendees):
        lifecycle.delete_session(db_session, session_id=live.id, actor=instructor)

    assert crud_live_session.get_required(db_session, live.id).participant_count == 2
    event_types = [c.kwargs["value"]["type"] for c in kafka_producer.send.call_args_list]
    assert event_types == ["SESSION_CREATED", "SESSION_STARTED", "SESSION_ENDED"]
