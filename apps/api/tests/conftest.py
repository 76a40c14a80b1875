import os

os.environ.setdefault("DRIFTSIP_DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("DRIFTSIP_TESTING", "true")
os.environ.setdefault("DRIFTSIP_ARCHIVE_SCHEDULER_ENABLED", "false")

from datetime import datetime, timedelta, timezone  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import app.models  # noqa: F401,E402
from app.db.base import Base  # noqa: E402
from app.db.session import SessionLocal  # noqa: E402
from app.db.session import engine as app_engine  # noqa: E402
from app.dependencies import get_clock  # noqa: E402
from app.main import app  # noqa: E402
from app.observability import metrics_store  # noqa: E402
from app.services.orders_service import OrderLifecycleService  # noqa: E402

FIXED_NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=app_engine)
    Base.metadata.create_all(bind=app_engine)
    yield


@pytest.fixture(autouse=True)
def reset_metrics_store():
    metrics_store.reset()
    yield


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def db_session():
    db = SessionLocal()
    yield db
    db.close()


@pytest.fixture
def order_service(db_session, clock):
    return OrderLifecycleService(db_session, clock=clock)


@pytest.fixture
def client(clock):
    app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
