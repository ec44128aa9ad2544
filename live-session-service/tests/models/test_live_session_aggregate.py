"""
Tests for the LiveSession aggregate.

Exercises the rules the aggregate enforces on its own, without a database:
- Capacity, uniqueness and open/closed registration
- Lifecycle transitions and their timestamps
- Attendance tracking and the end-of-session settlement
- Feedback upserts and the half-up rounded average
- The deletion guard
"""

from datetime import timedelta

import pytest

from live_sessions.constants.session import ParticipantStatus, SessionStatus
from live_sessions.core.exceptions import (
    AlreadyRegistered,
    CapacityBelowRegistrations,
    HasAttendees,
    InvalidRating,
    InvalidTransition,
    NotAnAttendee,
    ParticipantNotFound,
    RegistrationClosed,
    SessionFull,
    SessionLive,
    SessionNotCompleted,
)
from live_sessions.models.live_session import LiveSession, rounded_mean
from live_sessions.utils.time import utcnow


def make_session(max_participants=3, status=SessionStatus.SCHEDULED) -> LiveSession:
    return LiveSession(
        id="lses_test",
        title="Bronze Age Trade Routes",
        category="history",
        instructor_id="instructor_1",
        scheduled_at=utcnow() + timedelta(days=1),
        duration_minutes=60,
        max_participants=max_participants,
        participant_count=0,
        average_rating=0.0,
        status=status,
    )


def completed_session(attended=(), absent=()) -> LiveSession:
    live = make_session(max_participants=10)
    for user_id in (*attended, *absent):
        live.add_participant(user_id)
    live.start()
    for user_id in attended:
        live.mark_joined(user_id)
    live.end()
    return live


class TestRegistration:

    def test_fills_up_to_capacity_then_rejects(self):
        live = make_session(max_participants=2)
        live.add_participant("u1")
        live.add_participant("u2")

        with pytest.raises(SessionFull):
            live.add_participant("u3")

        assert live.participant_count == 2
        assert live.available_spots == 0
        assert live.is_full

    def test_duplicate_registration_is_rejected(self):
        live = make_session()
        live.add_participant("u1")

        with pytest.raises(AlreadyRegistered):
            live.add_participant("u1")
        assert live.participant_count == 1

    def test_duplicate_is_reported_before_full(self):
        live = make_session(max_participants=1)
        live.add_participant("u1")

        with pytest.raises(AlreadyRegistered):
            live.add_participant("u1")

    def test_new_participant_starts_registered(self):
        live = make_session()
        participant = live.add_participant("u1")

        assert participant.status == ParticipantStatus.REGISTERED
        assert participant.registered_at is not None
        assert participant.joined_at is None

    @pytest.mark.parametrize("status", [SessionStatus.COMPLETED, SessionStatus.CANCELLED])
    def test_closed_for_terminal_sessions(self, status):
        live = make_session(status=status)
        with pytest.raises(RegistrationClosed):
            live.add_participant("u1")

    def test_live_registration_is_configurable(self):
        live = make_session(status=SessionStatus.LIVE)
        with pytest.raises(RegistrationClosed):
            live.add_participant("u1", allow_live=False)

        live.add_participant("u1", allow_live=True)
        assert live.is_registered("u1")

    def test_remove_participant_is_idempotent(self):
        live = make_session()
        live.add_participant("u1")

        assert live.remove_participant("u1") is True
        assert live.remove_participant("u1") is False
        assert live.participant_count == 0

    def test_removing_attendee_drops_their_feedback(self):
        live = completed_session(attended=("u1", "u2"))
        live.upsert_feedback("u1", 5)
        live.upsert_feedback("u2", 2)
        assert live.average_rating == 3.5

        live.remove_participant("u2")

        assert live.find_feedback("u2") is None
        assert live.average_rating == 5.0


class TestLifecycle:

    def test_happy_path_sets_timestamps(self):
        live = make_session()
        live.start(meeting_link="https://meet.example.org/abc")
        assert live.status == SessionStatus.LIVE
        assert live.started_at is not None
        assert live.meeting_link == "https://meet.example.org/abc"

        live.end(recording_url="https://cdn.example.org/rec.mp4")
        assert live.status == SessionStatus.COMPLETED
        assert live.ended_at is not None
        assert live.recording_url == "https://cdn.example.org/rec.mp4"

    def test_cancel_from_scheduled(self):
        live = make_session()
        live.cancel()
        assert live.status == SessionStatus.CANCELLED
        assert live.cancelled_at is not None

    @pytest.mark.parametrize(
        "status, action",
        [
            (SessionStatus.SCHEDULED, "end"),
            (SessionStatus.LIVE, "start"),
            (SessionStatus.LIVE, "cancel"),
            (SessionStatus.COMPLETED, "start"),
            (SessionStatus.COMPLETED, "cancel"),
            (SessionStatus.CANCELLED, "start"),
        ],
    )
    def test_illegal_transitions(self, status, action):
        live = make_session(status=status)
        with pytest.raises(InvalidTransition):
            getattr(live, action)()
        assert live.status == status

    def test_update_only_while_scheduled(self):
        live = make_session(status=SessionStatus.LIVE)
        with pytest.raises(InvalidTransition):
            live.update_details({"title": "Renamed"})

    def test_capacity_cannot_drop_below_registrations(self):
        live = make_session(max_participants=5)
        for user_id in ("u1", "u2", "u3"):
            live.add_participant(user_id)

        with pytest.raises(CapacityBelowRegistrations):
            live.update_details({"max_participants": 2})

        live.update_details({"max_participants": 3, "title": "Renamed"})
        assert live.max_participants == 3
        assert live.title == "Renamed"


class TestAttendance:

    def test_signals_ignored_unless_live(self):
        live = make_session()
        live.add_participant("u1")

        assert live.mark_joined("u1") is False
        assert live.mark_left("u1") is False
        assert live.find_participant("u1").joined_at is None

    def test_unknown_participant_while_live(self):
        live = make_session()
        live.start()
        with pytest.raises(ParticipantNotFound):
            live.mark_joined("stranger")
        with pytest.raises(ParticipantNotFound):
            live.mark_left("stranger")

    def test_rejoin_keeps_first_join_and_clears_leave(self):
        live = make_session()
        live.add_participant("u1")
        live.start()
        first = utcnow()

        live.mark_joined("u1", now=first)
        live.mark_left("u1", now=first + timedelta(minutes=5))
        live.mark_joined("u1", now=first + timedelta(minutes=10))

        participant = live.find_participant("u1")
        assert participant.joined_at == first
        assert participant.left_at is None

    def test_end_settles_attended_and_absent(self):
        live = make_session(max_participants=5)
        for user_id in ("u1", "u2", "u3"):
            live.add_participant(user_id)
        live.start()
        live.mark_joined("u1")
        live.mark_joined("u2")
        live.mark_left("u2")

        outcome = live.end()

        assert outcome == {"attended": 2, "absent": 1}
        assert live.find_participant("u1").status == ParticipantStatus.ATTENDED
        assert live.find_participant("u1").left_at is not None
        assert live.find_participant("u2").status == ParticipantStatus.ATTENDED
        assert live.find_participant("u3").status == ParticipantStatus.ABSENT

    def test_duration_in_minutes(self):
        live = make_session()
        live.add_participant("u1")
        live.start()
        joined = utcnow()
        live.mark_joined("u1", now=joined)
        live.mark_left("u1", now=joined + timedelta(minutes=42))

        assert live.find_participant("u1").duration_minutes() == 42


class TestFeedback:

    @pytest.mark.parametrize("rating", [0, 6, -1, True, "5", 4.5])
    def test_invalid_ratings(self, rating):
        live = completed_session(attended=("u1",))
        with pytest.raises(InvalidRating):
            live.upsert_feedback("u1", rating)
        assert live.feedback == []

    def test_requires_completed_session(self):
        live = make_session()
        live.add_participant("u1")
        live.start()
        live.mark_joined("u1")

        with pytest.raises(SessionNotCompleted):
            live.upsert_feedback("u1", 5)

    def test_absent_participant_cannot_rate(self):
        live = completed_session(attended=("u1",), absent=("u2",))
        with pytest.raises(NotAnAttendee):
            live.upsert_feedback("u2", 4)

    def test_stranger_cannot_rate(self):
        live = completed_session(attended=("u1",))
        with pytest.raises(NotAnAttendee):
            live.upsert_feedback("stranger", 4)

    def test_average_and_resubmission(self):
        live = completed_session(attended=("a", "b", "c"))
        live.upsert_feedback("a", 5)
        live.upsert_feedback("b", 3)
        live.upsert_feedback("c", 4)
        assert live.average_rating == 4.0

        live.upsert_feedback("a", 1, "Changed my mind")

        assert len(live.feedback) == 3
        assert live.find_feedback("a").comment == "Changed my mind"
        # (1 + 3 + 4) / 3 = 2.666...
        assert live.average_rating == 2.7


class TestRoundedMean:

    def test_empty_is_zero(self):
        assert rounded_mean([]) == 0.0

    def test_rounds_half_up(self):
        # 2.25 would round to 2.2 under banker's rounding
        assert rounded_mean([2, 2, 2, 3]) == 2.3
        assert rounded_mean([4, 5]) == 4.5
        assert rounded_mean([1, 1, 2]) == 1.3


class TestDeletionGuard:

    def test_live_session_cannot_be_deleted(self):
        live = make_session(status=SessionStatus.LIVE)
        with pytest.raises(SessionLive):
            live.ensure_deletable()

    def test_completed_with_participants_is_kept(self):
        live = completed_session(absent=("u1",))
        with pytest.raises(HasAttendees):
            live.ensure_deletable()

    def test_completed_without_participants_and_cancelled_are_deletable(self):
        completed_session().ensure_deletable()

        cancelled = make_session()
        cancelled.add_participant("u1")
        cancelled.cancel()
        cancelled.ensure_deletable()
