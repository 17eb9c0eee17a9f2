import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.Core.config import settings
from src.DB.base import Base
from src.DB.database import get_db
from src.main import app
from src.Repositories import device as device_repo
from src.Repositories import session as session_repo
from src.Repositories import user as user_repo
from src.Schemas.device import Device_create
from src.Schemas.ra import SessionDevice


engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def clean_db(tmp_path, monkeypatch):
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    monkeypatch.setattr(settings, "DATA_DIR", str(tmp_path / "blobs"))
    yield


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def user(db):
    return user_repo.create_user(db, "jan", "jan")


@pytest.fixture
def other_user(db):
    return user_repo.create_user(db, "eva", "eva")


@pytest.fixture
def device(db, user):
    form = Device_create(name="meteo1", passphrase="secret", desc="Weather station")
    return device_repo.create_device(db, form, user)


@pytest.fixture
def session_device(db, device):
    session_id = session_repo.create_session(db, device.id, True, "h" * 64, "k" * 32, "10.0.0.1", "meteo")
    return SessionDevice(session_id=session_id, session_key="k" * 32, device_id=device.id)
