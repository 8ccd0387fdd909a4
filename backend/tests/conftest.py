import os
import tempfile

_TMP = tempfile.mkdtemp(prefix="order-splitter-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(_TMP, 'app.db')}")
os.environ.setdefault("LOG_DIR", os.path.join(_TMP, "logs"))
os.environ.setdefault("UPLOAD_TMP_DIR", os.path.join(_TMP, "uploads"))
os.environ.setdefault("FRONTEND_URL", "http://frontend.test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from order_splitter.database import Base, get_db
from order_splitter.main import app
from order_splitter.routes.session import get_image_host


class FakeImageHost:
    """Stands in for Cloudinary; records what it was asked to upload."""

    def __init__(self, url="https://res.cloudinary.com/demo/image/upload/bill.jpg", fail=False):
        self.url = url
        self.fail = fail
        self.uploads = []

    def upload_file(self, upload):
        if upload is None or not upload.filename:
            return ""
        self.uploads.append(upload.filename)
        if self.fail:
            from order_splitter.exceptions import UpstreamServiceError
            raise UpstreamServiceError("Failed to upload bill image")
        return self.url


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def db_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(db_factory):
    session = db_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def image_host():
    return FakeImageHost()


@pytest.fixture()
def client(db_factory, image_host):
    def override_get_db():
        session = db_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_image_host] = lambda: image_host
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def make_session(client):
    def _make(**fields):
        data = {
            "totalOrderAmount": "150",
            "taxPercentage": "15",
            "servicePercentage": "10",
            "deliveryFee": "5",
            "numberOfFriends": "3",
        }
        data.update({k: str(v) for k, v in fields.items()})
        response = client.post("/api/sessions", data=data)
        assert response.status_code == 201, response.text
        return response.json()["session"]["sessionId"]

    return _make


def pizza_order(name="Alice", payment_method=False):
    return {
        "name": name,
        "paymentMethod": payment_method,
        "products": [
            {"productName": "Pizza", "unitPrice": 25, "quantity": 2},
            {"productName": "Cola", "unitPrice": 3, "quantity": 1},
        ],
    }
