from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.database import get_db, get_engine, init_db
from app.main import app
from app.repositories.users import UserRepository

ALUMNI_ID = "alumni-u1"
OTHER_ALUMNI_ID = "alumni-u2"
STUDENT_ID = "student-s1"
OTHER_STUDENT_ID = "student-s2"
DELETED_STUDENT_ID = "student-gone"


class FrozenClock:
    """Stand-in for utc_now that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


def iso_in(days: float = 0, now: datetime | None = None, **kwargs) -> str:
    moment = (now or datetime.now(timezone.utc)) + timedelta(days=days, **kwargs)
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")


def job_payload(now: datetime | None = None, **overrides) -> dict:
    payload = {
        "job_title": "Backend Engineer",
        "job_description": "Build and run the placement APIs.",
        "designation": "SDE-1",
        "location": "Bengaluru",
        "mode": "Hybrid",
        "experience": "0-2 years",
        "salary": "12 LPA",
        "vacancy": 2,
        "joining_date": iso_in(days=10, now=now),
        "status": "OPEN",
        "open_till": iso_in(days=5, now=now),
    }
    payload.update(overrides)
    return payload


def identity_headers(user_id: str, role: str) -> dict:
    return {"X-User-Id": user_id, "X-User-Role": role}


@pytest.fixture
def test_db(tmp_path):
    db_path = tmp_path / "jobboard.sqlite"
    init_db(db_path)
    engine = get_engine(db_path)
    TestSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    def override_get_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestSession
    app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture
def db(test_db):
    session = test_db()
    yield session
    session.close()


@pytest.fixture
def users(db):
    repo = UserRepository(db)
    repo.add(ALUMNI_ID, "ALUMNI", full_name="Asha Rao", email_address="asha@example.org", passing_batch="2015")
    repo.add(OTHER_ALUMNI_ID, "ALUMNI", full_name="Vikram Shah", passing_batch="2012")
    repo.add(STUDENT_ID, "STUDENT", full_name="Meera Iyer", github="meera-i")
    repo.add(OTHER_STUDENT_ID, "STUDENT", full_name="Kabir Das")
    repo.add(DELETED_STUDENT_ID, "STUDENT", full_name="Gone Student", is_deleted=True)
    return repo


@pytest.fixture
def clock():
    return FrozenClock(datetime(2030, 1, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def client(test_db, users):
    return TestClient(app)


@pytest.fixture
def alumni_headers():
    return identity_headers(ALUMNI_ID, "ALUMNI")


@pytest.fixture
def student_headers():
    return identity_headers(STUDENT_ID, "STUDENT")
