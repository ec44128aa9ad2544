import pytest
from sqlalchemy.orm import Session

from live_sessions.core.exceptions import ParticipantNotFound, SessionNotFound
from live_sessions.crud import live_session as crud_live_session
from live_sessions.services.attendance import attendance_service
from tests.utils.live_session import create_random_live_session


@pytest.fixture
def registered_session(db_session: Session):
    live = create_random_live_session(db_session)
    crud_live_session.apply(db_session, live.id, lambda s: s.add_participant("u1"))
    return live


def test_join_before_start_is_ignored(db_session: Session, registered_session):
    live, recorded = attendance_service.mark_joined(
        db_session, session_id=registered_session.id, user_id="u1"
    )

    assert recorded is False
    assert live.find_participant("u1").joined_at is None


def test_join_and_leave_while_live(db_session: Session, registered_session):
    crud_live_session.apply(db_session, registered_session.id, lambda s: s.start())

    live, joined = attendance_service.mark_joined(
        db_session, session_id=registered_session.id, user_id="u1"
    )
    assert joined is True
    assert live.find_participant("u1").joined_at is not None

    live, left = attendance_service.mark_left(
        db_session, session_id=registered_session.id, user_id="u1"
    )
    assert left is True
    assert live.find_participant("u1").left_at is not None

    live, _ = attendance_service.mark_joined(
        db_session, session_id=registered_session.id, user_id="u1"
    )
    assert live.find_participant("u1").left_at is None


def test_unregistered_user_while_live(db_session: Session, registered_session):
    crud_live_session.apply(db_session, registered_session.id, lambda s: s.start())

    with pytest.raises(ParticipantNotFound):
        attendance_service.mark_joined(
            db_session, session_id=registered_session.id, user_id="stranger"
        )


def test_leave_after_end_is_ignored(db_session: Session, registered_session):
    crud_live_session.apply(db_session, registered_session.id, lambda s: s.start())
    crud_live_session.apply(db_session, registered_session.id, lambda s: s.end())

    _, recorded = attendance_service.mark_left(
        db_session, session_id=registered_session.id, user_id="u1"
    )
    assert recorded is False


def test_unknown_session(db_session: Session):
    with pytest.raises(SessionNotFound):
        attendance_service.mark_joined(db_session, session_id="lses_missing", user_id="u1")
