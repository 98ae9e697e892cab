"""
Pytest fixtures for storefront tests.

Every test gets a fresh SQLite database file; the API is exercised through
FastAPI's TestClient with `get_db` overridden. Kafka is disabled.
"""
import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["KAFKA_ENABLED"] = "false"
os.environ["RUN_MIGRATIONS_ON_STARTUP"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from storefront.auth.jwt_validator import jwt_validator
from storefront.db.database import Base, engine_options, get_db
from storefront.main import app
from storefront.models import Product, User
from storefront.services.user_service import UserService


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite so worker threads share the same database"""
    url = f"sqlite:///{tmp_path / 'storefront.db'}"
    engine = create_engine(url, **engine_options(url))

    @event.listens_for(engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Factory: register an account"""
    counter = {"n": 0}

    def _make_user(email=None, password="secret123", role="customer", **kwargs):
        counter["n"] += 1
        return UserService(db).register(
            email=email or f"user{counter['n']}@example.com",
            password=password,
            first_name=kwargs.get("first_name", "Awa"),
            last_name=kwargs.get("last_name", "Diop"),
            role=role,
        )

    return _make_user


@pytest.fixture
def customer(make_user):
    return make_user(email="awa@example.com")


@pytest.fixture
def other_customer(make_user):
    return make_user(email="fatou@example.com", first_name="Fatou", last_name="Ndiaye")


@pytest.fixture
def admin(make_user):
    return make_user(email="admin@example.com", role="admin", first_name="Admin", last_name="Belleza")


@pytest.fixture
def make_product(db):
    """Factory: insert a product directly"""

    def _make_product(name="Savon noir", price=3500, stock=0, **kwargs):
        product = Product(
            name=name,
            price=price,
            stock=stock,
            currency=kwargs.pop("currency", "XOF"),
            status=kwargs.pop("status", "active"),
            image_urls=kwargs.pop("image_urls", []),
            **kwargs
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make_product


@pytest.fixture
def out_of_stock_product(make_product):
    return make_product(name="Huile capillaire", price=6500, stock=0)


@pytest.fixture
def in_stock_product(make_product):
    return make_product(name="Sérum vitamine C", price=12500, stock=4,
                        image_urls=["https://cdn.example.com/serum.jpg"])


def auth_headers(user: User) -> dict:
    token = jwt_validator.issue_token(user_id=user.id, email=user.email, role=user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer_headers(customer):
    return auth_headers(customer)


@pytest.fixture
def other_customer_headers(other_customer):
    return auth_headers(other_customer)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def headers_for():
    return auth_headers
