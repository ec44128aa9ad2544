import threading

import pytest
from sqlalchemy.orm import Session

from live_sessions.core.exceptions import (
    InvalidRating,
    NotAnAttendee,
    SessionNotCompleted,
)
from live_sessions.crud import live_session as crud_live_session
from live_sessions.services.feedback_aggregator import feedback_aggregator
from tests.utils.live_session import create_random_live_session, run_session


def test_invalid_rating_is_rejected_before_lookup(db_session: Session):
    # No such session: the rating check must come first
    with pytest.raises(InvalidRating):
        feedback_aggregator.submit_feedback(
            db_session, session_id="lses_missing", user_id="u1", rating=9
        )


def test_average_is_recomputed_on_every_submission(db_session: Session):
    live = create_random_live_session(db_session)
    run_session(db_session, live, registered=["a", "b", "c"], joined=["a", "b", "c"])

    feedback_aggregator.submit_feedback(db_session, session_id=live.id, user_id="a", rating=5)
    feedback_aggregator.submit_feedback(db_session, session_id=live.id, user_id="b", rating=3)
    result = feedback_aggregator.submit_feedback(
        db_session, session_id=live.id, user_id="c", rating=4, comment="Great maps"
    )
    assert result.average_rating == 4.0
    assert result.feedback_count == 3

    result = feedback_aggregator.submit_feedback(
        db_session, session_id=live.id, user_id="a", rating=1
    )
    assert result.average_rating == 2.7
    assert result.feedback_count == 3
    assert crud_live_session.get_required(db_session, live.id).average_rating == 2.7


def test_session_must_be_completed(db_session: Session):
    live = create_random_live_session(db_session)
    crud_live_session.apply(db_session, live.id, lambda s: s.add_participant("u1"))

    with pytest.raises(SessionNotCompleted):
        feedback_aggregator.submit_feedback(db_session, session_id=live.id, user_id="u1", rating=5)


def test_only_attendees_may_rate(db_session: Session):
    live = create_random_live_session(db_session)
    run_session(db_session, live, registered=["here", "away"], joined=["here"])

    with pytest.raises(NotAnAttendee):
        feedback_aggregator.submit_feedback(db_session, session_id=live.id, user_id="away", rating=4)
    with pytest.raises(NotAnAttendee):
        feedback_aggregator.submit_feedback(db_session, session_id=live.id, user_id="nobody", rating=4)

    stored = crud_live_session.get_required(db_session, live.id)
    assert stored.feedback == []
    assert stored.average_rating == 0.0


def test_concurrent_submissions_are_all_counted(db_session: Session, session_factory):
    live = create_random_live_session(db_session)
    voters = {"a": 5, "b": 4, "c": 4, "d": 2}
    run_session(db_session, live, registered=list(voters), joined=list(voters))

    barrier = threading.Barrier(len(voters))

    def vote(user_id, rating):
        db = session_factory()
        try:
            barrier.wait()
            feedback_aggregator.submit_feedback(db, session_id=live.id, user_id=user_id, rating=rating)
        finally:
            db.close()

    threads = [threading.Thread(target=vote, args=item) for item in voters.items()]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    db_session.expire_all()
    stored = crud_live_session.get_required(db_session, live.id)
    assert len(stored.feedback) == 4
    # 15 / 4 = 3.75
    assert stored.average_rating == 3.8
