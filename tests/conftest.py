import os

os.environ["SECRET_KEY"] = "test-secret"
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["LIVE_SYNC_ENABLED"] = "true"
os.environ["STORAGE_BACKEND"] = "local"

from datetime import date

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from infinity_timeline.core.security import create_access_token
from infinity_timeline.crud import user as user_crud
from infinity_timeline.db.database import Base, get_db
from infinity_timeline.main import app
from infinity_timeline.models.enums import UserRole
from infinity_timeline.models.flow import Flow
from infinity_timeline.models.timeline import ClientTimeline, TimelineTemplate
from infinity_timeline.redis.client import RedisClient
from infinity_timeline.schemas.user import UserCreate
from infinity_timeline.services.graph_store import GraphStore
from infinity_timeline.services.storage.local_store import LocalBlobStore

SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False, "timeout": 30},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    d = tmp_path / "uploads"
    d.mkdir()
    monkeypatch.setenv("UPLOAD_DIR", str(d))
    yield d


@pytest.fixture(autouse=True)
def redis_conn():
    conn = fakeredis.FakeRedis(decode_responses=True)
    RedisClient.set_instance(RedisClient(conn))
    yield conn
    RedisClient.set_instance(None)


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def make_user(db, email, role=UserRole.CLIENTE, monthly_fee=None, password="secret123"):
    user_in = UserCreate(
        email=email,
        full_name=email.split("@")[0].title(),
        password=password,
        role=role,
        monthly_fee=monthly_fee,
    )
    return user_crud.create(db, obj_in=user_in)


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def admin_user(db):
    return make_user(db, "admin@example.com", role=UserRole.ADMIN)


@pytest.fixture
def client_user(db):
    return make_user(db, "client@example.com", monthly_fee=1000)


@pytest.fixture
def other_client(db):
    return make_user(db, "other@example.com", monthly_fee=400)


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user)


@pytest.fixture
def client_headers(client_user):
    return auth_headers(client_user)


@pytest.fixture
def other_headers(other_client):
    return auth_headers(other_client)


@pytest.fixture
def template(db):
    template = TimelineTemplate(name="Growth Program", duration_months=6)
    db.add(template)
    db.commit()
    db.refresh(template)
    return template


@pytest.fixture
def template_flow(db, template, admin_user):
    flow = Flow(name=template.name, template_id=template.id, created_by=admin_user.id)
    db.add(flow)
    db.commit()
    db.refresh(flow)
    return flow


@pytest.fixture
def client_timeline(db, template, client_user):
    timeline = ClientTimeline(
        client_id=client_user.id,
        template_id=template.id,
        name=template.name,
        start_date=date(2024, 1, 1),
        end_date=date(2024, 7, 1),
    )
    db.add(timeline)
    db.commit()
    db.refresh(timeline)
    return timeline


@pytest.fixture
def instance_flow(db, client_timeline, admin_user):
    flow = Flow(
        name=client_timeline.name,
        client_timeline_id=client_timeline.id,
        created_by=admin_user.id,
    )
    db.add(flow)
    db.commit()
    db.refresh(flow)
    return flow


@pytest.fixture
def blob_store(upload_dir):
    return LocalBlobStore(str(upload_dir))


@pytest.fixture
def admin_store(admin_user, blob_store):
    return GraphStore(TestingSessionLocal, actor=admin_user, blob_store=blob_store)


@pytest.fixture
def client_store(client_user, blob_store):
    return GraphStore(TestingSessionLocal, actor=client_user, blob_store=blob_store)
