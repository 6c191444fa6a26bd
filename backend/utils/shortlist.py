# utils/shortlist.py
from typing import Iterable, Set

MAX_FINALISTS = 5


class FinalistCapExceeded(ValueError):
    def __init__(self, limit: int = MAX_FINALISTS):
        super().__init__(f"Maximum {limit} finalists allowed per category")
        self.limit = limit


def remaining_slots(current_finalists: Iterable[int], limit: int = MAX_FINALISTS) -> int:
    return max(limit - len(set(current_finalists)), 0)


def toggle_selection(selected: Set[int], nominee_id: int, current_finalists: Iterable[int],
                     limit: int = MAX_FINALISTS) -> Set[int]:
    """Select or deselect a nominee; adding one that would push finalists + selections past the cap raises."""
    result = set(selected)
    if nominee_id in result:
        result.discard(nominee_id)
        return result

    finalists = set(current_finalists)
    if nominee_id in finalists:
        return result
    if len(finalists) + len(result) + 1 > limit:
        raise FinalistCapExceeded(limit)
    result.add(nominee_id)
    return result


def toggle_all(selected: Set[int], candidates: Iterable[int], current_finalists: Iterable[int],
               limit: int = MAX_FINALISTS) -> Set[int]:
    """Deselect everything when all candidates are selected, otherwise select as many as the cap allows."""
    finalists = set(current_finalists)
    non_finalists = [c for c in dict.fromkeys(candidates) if c not in finalists]
    if non_finalists and set(selected) >= set(non_finalists):
        return set()
    return set(non_finalists[:remaining_slots(finalists, limit)])


def check_finalist_cap(current_finalists: Iterable[int], new_ids: Iterable[int],
                       limit: int = MAX_FINALISTS) -> Set[int]:
    """Return the finalist set after adding new_ids, raising if it would exceed the cap."""
    merged = set(current_finalists) | set(new_ids)
    if len(merged) > limit:
        raise FinalistCapExceeded(limit)
    return merged
