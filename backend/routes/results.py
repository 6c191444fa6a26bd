# backend/routes/results.py
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from sqlalchemy.orm import Session

from database import get_db
from models.category import Category, CategoryStatus
from models.staff import Staff
from routes.categories import category_to_out
from schemas.results import AdminCategoryResult, CategoryResult
from utils.audit import client_ip, write_log
from utils.csv_export import export_filename, results_to_csv
from utils.phases import utcnow
from utils.tally import percentage, vote_counts
from utils.tokenJWT import require_admin

router = APIRouter(tags=["Results"])


def _category_result(db: Session, category: Category, now=None) -> dict:
    counts = vote_counts(db, category.id)
    total = sum(c for _, c in counts)
    return {
        "category_id": category.id,
        "category": category_to_out(category, now),
        "nominees": [
            {"nominee": staff, "vote_count": c, "percentage": percentage(c, total)}
            for staff, c in counts
        ],
        "total_votes": total,
        "status": "completed" if category.status == CategoryStatus.CLOSED.value else "ongoing",
        "winner_id": category.winner_id,
    }


# Public results for every visible category that has received votes
@router.get("/results", response_model=List[CategoryResult])
def public_results(db: Session = Depends(get_db)):
    categories = (
        db.query(Category)
        .filter(Category.status.in_([CategoryStatus.PUBLISHED.value, CategoryStatus.CLOSED.value]))
        .order_by(Category.id.asc())
        .all()
    )
    now = utcnow()
    results = [_category_result(db, c, now) for c in categories]
    return [r for r in results if r["total_votes"] > 0]


# CSV download of vote counts (Admin only)
@router.get("/admin/results/export")
def export_results(
    request: Request,
    category_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: Staff = Depends(require_admin),
):
    query = db.query(Category)
    if category_id is not None:
        query = query.filter(Category.id == category_id)
    categories = query.order_by(Category.id.asc()).all()
    if category_id is not None and not categories:
        raise HTTPException(status_code=404, detail="Category not found")

    data = [
        {
            "category": c.title,
            "nominees": [
                {"name": staff.name, "department": staff.department, "votes": votes}
                for staff, votes in vote_counts(db, c.id)
            ],
        }
        for c in categories
    ]
    body = results_to_csv(data)
    title = categories[0].title if category_id is not None else None
    disposition = (
        f'attachment; filename="{export_filename(title)}"; '
        f"filename*=UTF-8''{quote(export_filename(title, ascii_only=False), safe='')}"
    )

    write_log(db, user_id=current_user.id, action="RESULTS_EXPORT", resource="results",
              status="SUCCESS", ip=client_ip(request), meta={"category_id": category_id})
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": disposition},
    )


@router.get("/admin/results/{category_id}", response_model=AdminCategoryResult)
def admin_category_results(
    category_id: int,
    db: Session = Depends(get_db),
    current_user: Staff = Depends(require_admin),
):
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")

    result = _category_result(db, category)
    nominees = result["nominees"]
    result["leading_nominee_id"] = nominees[0]["nominee"].id if nominees else None
    return result
