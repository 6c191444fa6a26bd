import pytest

from utils.shortlist import (
    MAX_FINALISTS, FinalistCapExceeded, check_finalist_cap, remaining_slots, toggle_all, toggle_selection,
)


def test_remaining_slots():
    assert remaining_slots([]) == MAX_FINALISTS
    assert remaining_slots([1, 2, 2]) == 3
    assert remaining_slots(range(7)) == 0


def test_toggle_selection_adds_and_removes():
    selected = toggle_selection(set(), 4, current_finalists=[1])
    assert selected == {4}
    assert toggle_selection(selected, 4, current_finalists=[1]) == set()


def test_toggle_selection_ignores_existing_finalist():
    assert toggle_selection({2}, 1, current_finalists=[1]) == {2}


def test_toggle_selection_refuses_past_cap():
    with pytest.raises(FinalistCapExceeded):
        toggle_selection({4, 5}, 6, current_finalists=[1, 2, 3])


def test_toggle_all_fills_only_free_slots():
    picked = toggle_all(set(), candidates=[1, 2, 3, 4, 5, 6, 7], current_finalists=[1, 2])
    assert picked == {3, 4, 5}


def test_toggle_all_clears_when_everything_selected():
    assert toggle_all({3, 4}, candidates=[1, 3, 4], current_finalists=[1]) == set()


def test_check_finalist_cap():
    assert check_finalist_cap([1, 2], [2, 3]) == {1, 2, 3}
    with pytest.raises(FinalistCapExceeded) as exc:
        check_finalist_cap([1, 2, 3, 4], [5, 6])
    assert "5" in str(exc.value)
