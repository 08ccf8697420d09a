import copy
import os

os.environ["ENV"] = "test"
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from selfiq.main import app
from selfiq.db import Base, get_db
from selfiq.core.assessment_catalog import AssessmentCatalog, parse_definition
from selfiq.dependencies import get_catalog
from selfiq.services.progress_store import ProgressStore
from selfiq.services.result_archive import ResultArchive
import selfiq.models  # noqa: F401

# Use SQLite in-memory for test DB
TEST_DATABASE_URL = "sqlite+pysqlite:///:memory:"
# StaticPool so the TestClient requests and the fixtures share one in-memory DB
engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Two questions: q1/a -> openness +3, q2/a -> openness +1, conscientiousness +4
TWO_STEP_DOC = {
    "testId": "two_step",
    "testName": "Two Step",
    "categoryId": "personality",
    "isPremium": False,
    "scoringCategories": ["openness", "conscientiousness", "extraversion"],
    "questions": [
        {
            "id": "q1",
            "text": "First",
            "answers": [
                {"id": "a", "text": "A", "score": {"openness": 3}},
                {"id": "b", "text": "B", "score": {"extraversion": 2}},
            ],
        },
        {
            "id": "q2",
            "text": "Second",
            "answers": [
                {"id": "a", "text": "A", "score": {"openness": 1, "conscientiousness": 4}},
                {"id": "b", "text": "B", "score": {"extraversion": -1}},
            ],
        },
    ],
}

PREMIUM_DOC = {
    "testId": "premium_deep",
    "testName": "Premium Deep Dive",
    "categoryId": "career",
    "isPremium": True,
    "scoringCategories": ["agreeableness"],
    "questions": [
        {"id": "p1", "text": "Only", "answers": [{"id": "x", "text": "X", "score": {"agreeableness": 1}}]},
    ],
}


def make_catalog() -> AssessmentCatalog:
    return AssessmentCatalog([parse_definition(TWO_STEP_DOC), parse_definition(PREMIUM_DOC)])


TEST_CATALOG = make_catalog()


# Dependency override
def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db
app.dependency_overrides[get_catalog] = lambda: TEST_CATALOG


@pytest.fixture(autouse=True)
def setup_test_db():
    # recreate schema for each test to ensure isolation
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.close()


@pytest.fixture
def catalog():
    return TEST_CATALOG


@pytest.fixture
def two_step(catalog):
    return catalog.get("two_step")


@pytest.fixture
def store(db_session):
    return ProgressStore(db_session)


@pytest.fixture
def archive(db_session):
    return ResultArchive(db_session)


@pytest.fixture
def user_headers():
    return {"Authorization": "Bearer mock-user-token"}


@pytest.fixture
def premium_headers():
    return {"Authorization": "Bearer mock-premium-token"}


@pytest.fixture
def two_step_doc():
    return copy.deepcopy(TWO_STEP_DOC)


@pytest.fixture
def premium_doc():
    return copy.deepcopy(PREMIUM_DOC)
