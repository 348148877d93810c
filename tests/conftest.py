import os

# Point the app at a throwaway database before any backend module reads settings
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from config import settings
from database import Base, get_db
from main import app
from models.category import Category, SuperCategory
from models.customer import Customer
from models.product import Product
from models.users import User
from packing.domain import CatalogProduct, CustomerRef
from packing.lookups import StaticCatalog, StaticCustomers
from routes import drafts as drafts_routes
from utils.hashing import get_password_hash
from utils.tokenJWT import get_current_user


@pytest.fixture
def catalog():
    return StaticCatalog([
        CatalogProduct(id=1, sku="PROD001", product_name="Sample Product 1", category_id=1),
        CatalogProduct(id=2, sku="PROD002", product_name="Sample Product 2", category_id=1),
    ])


@pytest.fixture
def customers():
    return StaticCustomers([
        CustomerRef(id=1, code="CUST001", name="Acme Traders"),
        CustomerRef(id=2, code="CUST002", name="Northwind Imports"),
    ])


def _seed(session):
    users = {
        role: User(email=f"{role.lower()}@shipdesk.io", password_hash=get_password_hash("secret"),
                   role=role, name=role.title())
        for role in ("ADMIN", "MANAGER", "OPERATOR")
    }
    session.add_all(users.values())

    sc = SuperCategory(name="Electronics")
    session.add(sc)
    session.flush()
    cat = Category(name="Accessories", super_category_id=sc.id)
    session.add(cat)
    session.flush()

    session.add_all([
        Product(sku="PROD001", product_name="Sample Product 1", category_id=cat.id, is_active=True),
        Product(sku="PROD002", product_name="Sample Product 2", category_id=cat.id, is_active=True),
        Product(sku="OLD001", product_name="Retired Product", category_id=cat.id, is_active=False),
    ])
    session.add_all([
        Customer(code="CUST001", name="Acme Traders", group="Retail", city="Mumbai",
                 state="Maharashtra", region="West", state_code="MH"),
        Customer(code="CUST002", name="Northwind Imports", group="Wholesale", city="Delhi",
                 state="Delhi", region="North", state_code="DL"),
    ])
    session.commit()
    return users


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def users(db_session):
    return _seed(db_session)


@pytest.fixture
def client(db_session, users, monkeypatch):
    """TestClient acting as the seeded ADMIN; use ``login_as`` to switch roles."""
    monkeypatch.setattr(settings, "DRAFT_REMOVAL_COOLDOWN_MS", 0)
    drafts_routes._guards.clear()

    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_current_user] = lambda: users["ADMIN"]
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    drafts_routes._guards.clear()


@pytest.fixture
def login_as(users):
    def _switch(role):
        app.dependency_overrides[get_current_user] = lambda: users[role]
    return _switch


@pytest.fixture
def anon_client(db_session, users):
    """TestClient with real JWT authentication."""
    app.dependency_overrides[get_db] = lambda: db_session
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
