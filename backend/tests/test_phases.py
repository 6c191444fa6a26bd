from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from utils.phases import CLOSED, NOMINATIONS, UPCOMING, VOTING, category_phase, to_naive_utc

NOW = datetime(2026, 3, 10, 12, 0, 0)


def _category(**fields):
    base = dict(
        status="published", winner_id=None, nomination_start=None, nomination_deadline=None,
        voting_start=None, voting_end=None,
    )
    base.update(fields)
    return SimpleNamespace(**base)


def test_nominations_open_before_deadline():
    c = _category(nomination_deadline=NOW + timedelta(days=2))
    assert category_phase(c, NOW) == NOMINATIONS


def test_nominations_not_open_before_start():
    c = _category(nomination_start=NOW + timedelta(hours=1), nomination_deadline=NOW + timedelta(days=2))
    assert category_phase(c, NOW) == UPCOMING


def test_voting_window_wins_over_nomination_window():
    c = _category(
        nomination_deadline=NOW + timedelta(days=1),
        voting_start=NOW - timedelta(hours=1),
        voting_end=NOW + timedelta(days=1),
    )
    assert category_phase(c, NOW) == VOTING


def test_open_ended_voting():
    c = _category(voting_start=NOW - timedelta(days=1))
    assert category_phase(c, NOW) == VOTING


def test_after_voting_end_is_closed():
    c = _category(voting_start=NOW - timedelta(days=5), voting_end=NOW - timedelta(days=1))
    assert category_phase(c, NOW) == CLOSED


def test_gap_between_deadline_and_voting_is_upcoming():
    c = _category(nomination_deadline=NOW - timedelta(days=1), voting_start=NOW + timedelta(days=1))
    assert category_phase(c, NOW) == UPCOMING


def test_closed_status_or_winner_closes():
    open_window = dict(nomination_deadline=NOW + timedelta(days=3))
    assert category_phase(_category(status="closed", **open_window), NOW) == CLOSED
    assert category_phase(_category(winner_id=7, **open_window), NOW) == CLOSED


def test_no_dates_is_upcoming():
    assert category_phase(_category(), NOW) == UPCOMING


def test_aware_datetimes_are_compared_in_utc():
    plus_two = timezone(timedelta(hours=2))
    # 13:00 at +02:00 is 11:00 UTC, one hour before NOW
    deadline = datetime(2026, 3, 10, 13, 0, tzinfo=plus_two)
    assert to_naive_utc(deadline) == datetime(2026, 3, 10, 11, 0)
    assert category_phase(_category(nomination_deadline=deadline), NOW) == UPCOMING
