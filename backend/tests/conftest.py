import os
import tempfile
from datetime import timedelta

import pytest

# Point the app at a throwaway database and upload folder before anything imports settings
_TMP = tempfile.mkdtemp(prefix="awards-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP, 'test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP, "uploads")
os.environ["GOOGLE_CLIENT_ID"] = ""
os.environ["GOOGLE_CLIENT_SECRET"] = ""

from fastapi.testclient import TestClient  # noqa: E402

from database import Base, SessionLocal, engine  # noqa: E402
from main import app  # noqa: E402
from models.category import Category  # noqa: E402
from models.nomination import Nomination  # noqa: E402
from models.staff import Staff  # noqa: E402
from utils.hashing import get_password_hash  # noqa: E402
from utils.phases import utcnow  # noqa: E402
from utils.tokenJWT import open_session  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_staff(db):
    counter = {"n": 0}

    def _make(name=None, email=None, role="staff", department="Engineering", password=None):
        counter["n"] += 1
        n = counter["n"]
        staff = Staff(
            name=name or f"Person {n:02d}",
            email=(email or f"person{n}@example.com").lower(),
            position="Engineer",
            department=department,
            role=role,
            password_hash=get_password_hash(password) if password else None,
        )
        db.add(staff)
        db.commit()
        db.refresh(staff)
        return staff

    return _make


@pytest.fixture
def auth_headers(db):
    def _headers(staff):
        token, _ = open_session(db, staff)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def admin(make_staff):
    return make_staff(name="Admin User", email="admin@example.com", role="admin", department="People")


@pytest.fixture
def admin_headers(admin, auth_headers):
    return auth_headers(admin)


@pytest.fixture
def make_category(db):
    """Published category; phase picks which window contains now."""

    def _make(title="Employee of the Year", status="published", phase="nominations", **fields):
        now = utcnow()
        windows = {
            "nominations": dict(nomination_start=now - timedelta(days=1), nomination_deadline=now + timedelta(days=7)),
            "voting": dict(nomination_deadline=now - timedelta(days=7),
                           voting_start=now - timedelta(days=1), voting_end=now + timedelta(days=7)),
            "upcoming": dict(nomination_start=now + timedelta(days=1), nomination_deadline=now + timedelta(days=7)),
        }[phase]
        windows.update(fields)
        category = Category(title=title, status=status, type="Individual Award", **windows)
        db.add(category)
        db.commit()
        db.refresh(category)
        return category

    return _make


@pytest.fixture
def make_nomination(db):
    def _make(category, nominee, nominator, status="pending", is_finalist=False, reason="Great work"):
        nomination = Nomination(
            category_id=category.id,
            nominee_id=nominee.id,
            nominator_id=nominator.id if nominator else None,
            reason=reason,
            status=status,
            is_finalist=is_finalist,
        )
        db.add(nomination)
        db.commit()
        db.refresh(nomination)
        return nomination

    return _make
