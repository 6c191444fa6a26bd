# utils/csv_export.py
import re
import unicodedata
from typing import Iterable, List, Sequence

import pandas as pd

CSV_COLUMNS = ["Category", "Nominee", "Department", "Votes", "Is Winner"]


def winner_index(counts: Sequence[int]) -> int:
    """Index of the single leading count, or -1 when nobody has a vote. Rows are expected pre-sorted."""
    if not counts:
        return -1
    best = max(range(len(counts)), key=lambda i: (counts[i], -i))
    return best if counts[best] > 0 else -1


def build_results_frame(category_results: Iterable[dict]) -> pd.DataFrame:
    """
    One row per (category, nominee).

    Each element of category_results is {"category": <title>, "nominees":
    [{"name", "department", "votes"}, ...]} with nominees sorted by votes desc
    then name, so the first row holds the winner when it has any votes.
    """
    rows: List[dict] = []
    for result in category_results:
        nominees = result["nominees"]
        win = winner_index([n["votes"] for n in nominees])
        for i, n in enumerate(nominees):
            rows.append({
                "Category": result["category"],
                "Nominee": n["name"],
                "Department": n.get("department") or "",
                "Votes": int(n["votes"]),
                "Is Winner": "Yes" if i == win else "No",
            })
    return pd.DataFrame(rows, columns=CSV_COLUMNS)


def results_to_csv(category_results: Iterable[dict]) -> str:
    return build_results_frame(category_results).to_csv(index=False)


def export_filename(title: str | None = None, ascii_only: bool = True) -> str:
    """
    Download name for a results export. The default ASCII form is safe in a
    plain Content-Disposition filename; ascii_only=False keeps accented
    characters for the RFC 5987 filename* parameter.
    """
    if not title:
        return "voting_results.csv"
    stem = "_".join(title.split()).lower()
    if ascii_only:
        stem = unicodedata.normalize("NFKD", stem).encode("ascii", "ignore").decode("ascii")
        stem = re.sub(r"[^a-z0-9_-]+", "", stem).strip("_") or "category"
    return f"{stem}_results.csv"
