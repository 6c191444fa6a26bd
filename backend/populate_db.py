import os
import sys
from datetime import timedelta

import pandas as pd

# Add 'backend' folder to Python path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from database import SessionLocal, init_db
from models.category import Category, CategoryStatus, CategoryType
from models.department import Department
from models.staff import Staff
from utils.hashing import get_password_hash
from utils.phases import utcnow

# Configuration
DATA_DIR = os.path.join(os.path.dirname(__file__), "data_source")
STAFF_CSV = os.path.join(DATA_DIR, "staff.csv")
STAFF_COLUMNS = ["name", "email", "position", "department"]

ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@example.com")
ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "ChangeMe123!")

DEPARTMENTS = [
    ("Engineering", "Product and platform engineering"),
    ("Operations", "Facilities, logistics and support"),
    ("People", "HR, recruitment and learning"),
    ("Sales", "Account management and new business"),
]

SAMPLE_STAFF = [
    {"name": "Amara Okafor", "email": "amara.okafor@example.com", "position": "Senior Engineer", "department": "Engineering"},
    {"name": "Ben Carter", "email": "ben.carter@example.com", "position": "Operations Lead", "department": "Operations"},
    {"name": "Chen Wei", "email": "chen.wei@example.com", "position": "Recruiter", "department": "People"},
    {"name": "Dana Ruiz", "email": "dana.ruiz@example.com", "position": "Account Executive", "department": "Sales"},
    {"name": "Elif Demir", "email": "elif.demir@example.com", "position": "Engineer", "department": "Engineering"},
]
# End Configuration


def load_staff_frame() -> pd.DataFrame:
    """Staff rows from data_source/staff.csv, or the built-in sample when the file is absent."""
    if os.path.exists(STAFF_CSV):
        df = pd.read_csv(STAFF_CSV)
        missing = [c for c in STAFF_COLUMNS if c not in df.columns]
        if missing:
            raise ValueError(f"{STAFF_CSV} is missing columns: {missing}")
    else:
        print(f"No {STAFF_CSV}, using sample staff.")
        df = pd.DataFrame(SAMPLE_STAFF)

    df = df[STAFF_COLUMNS].copy()
    df["email"] = df["email"].str.strip().str.lower()
    df.dropna(subset=["name", "email"], inplace=True)
    df.drop_duplicates(subset=["email"], inplace=True)
    return df.where(pd.notnull(df), None)


def seed_departments(session) -> int:
    existing = {d.name.lower() for d in session.query(Department).all()}
    added = 0
    for name, description in DEPARTMENTS:
        if name.lower() not in existing:
            session.add(Department(name=name, description=description))
            added += 1
    session.flush()
    return added


def seed_staff(session, df: pd.DataFrame) -> int:
    existing = {e for (e,) in session.query(Staff.email).all()}
    added = 0
    for row in df.to_dict(orient="records"):
        if row["email"] in existing:
            continue
        session.add(Staff(
            name=row["name"],
            email=row["email"],
            position=row.get("position"),
            department=row.get("department"),
            role="staff",
        ))
        added += 1

    admin = session.query(Staff).filter(Staff.email == ADMIN_EMAIL.lower()).first()
    if not admin:
        session.add(Staff(
            name="Awards Admin",
            email=ADMIN_EMAIL.lower(),
            position="Administrator",
            department="People",
            role="admin",
            password_hash=get_password_hash(ADMIN_PASSWORD),
        ))
        added += 1
    session.flush()
    return added


def seed_categories(session) -> int:
    if session.query(Category).count():
        return 0

    now = utcnow()
    categories = [
        Category(
            title="Employee of the Year",
            description="Outstanding contribution across the whole year.",
            type=CategoryType.INDIVIDUAL.value,
            status=CategoryStatus.PUBLISHED.value,
            nomination_start=now - timedelta(days=1),
            nomination_deadline=now + timedelta(days=14),
            shortlisting_start=now + timedelta(days=14),
            shortlisting_end=now + timedelta(days=17),
            voting_start=now + timedelta(days=18),
            voting_end=now + timedelta(days=25),
        ),
        Category(
            title="Team of the Year",
            description="A team that raised the bar together.",
            type=CategoryType.TEAM.value,
            status=CategoryStatus.DRAFT.value,
            nomination_deadline=now + timedelta(days=30),
        ),
    ]
    session.add_all(categories)
    session.flush()
    return len(categories)


def populate_database():
    init_db()
    session = SessionLocal()
    try:
        departments = seed_departments(session)
        staff = seed_staff(session, load_staff_frame())
        categories = seed_categories(session)
        session.commit()
        print(f"Seeded {departments} departments, {staff} staff members and {categories} categories.")
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


if __name__ == "__main__":
    populate_database()
