"""Pytest configuration and fixtures."""

import os

# Point the app at the test database before any src module builds its engine
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from src.database import Base, build_engine, get_db, init_db  # noqa: E402
from src.main import app  # noqa: E402
from src.schemas.meal_plan import MealPlanEntry  # noqa: E402
from src.schemas.shopping import InventoryRecord  # noqa: E402
from src.services.categorization import CategoryClassifier  # noqa: E402
from src.services.preference_store import InMemoryPreferenceStore  # noqa: E402

SQLALCHEMY_DATABASE_URL = os.environ["DATABASE_URL"]

engine = build_engine(SQLALCHEMY_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    init_db(bind=engine)
    yield


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def user_headers():
    """Headers identifying the calling user."""
    return {"X-User-Id": "1"}


@pytest.fixture
def preference_store():
    """Empty in-memory preference store."""
    return InMemoryPreferenceStore()


@pytest.fixture
def classifier(preference_store):
    """Classifier backed by the in-memory preference store."""
    return CategoryClassifier(preference_store)


@pytest.fixture
def pantry_inventory():
    """A small household inventory."""
    return [
        InventoryRecord(id=1, name="All-Purpose Flour", quantity=5, unit="cups", location="pantry"),
        InventoryRecord(id=2, name="Chicken Breast", quantity=2, unit="lb", location="freezer"),
        InventoryRecord(id=3, name="Olive Oil", quantity=1, unit="bottle", location="pantry"),
        InventoryRecord(id=4, name="Vegetable Oil", quantity=1, unit="bottle", location="pantry"),
        InventoryRecord(id=5, name="Large Eggs", quantity=12, unit="each", location="fridge"),
    ]


@pytest.fixture
def flour_meal_plan():
    """Two recipes on different days that both use flour."""
    return [
        MealPlanEntry.model_validate(
            {
                "day": "monday",
                "meal_type": "breakfast",
                "recipe": {
                    "title": "Pancakes",
                    "servings": 4,
                    "ingredients": [
                        {"name": "Flour", "amount": 2, "unit": "cups"},
                        {"name": "Eggs", "amount": 2, "unit": "each"},
                        {"name": "Milk", "amount": "1 1/2 cups"},
                    ],
                },
            }
        ),
        MealPlanEntry.model_validate(
            {
                "day": "tuesday",
                "meal_type": "dinner",
                "recipe": {
                    "title": "Gravy Biscuits",
                    "servings": 4,
                    "ingredients": [
                        {"name": "flour", "amount": 1, "unit": "cup"},
                        {"name": "Butter", "amount": 4, "unit": "tbsp"},
                    ],
                },
            }
        ),
    ]
