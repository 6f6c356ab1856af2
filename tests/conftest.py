import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BREVO_API_KEY"] = ""
os.environ["AZURE_STORAGE_ACCOUNT"] = ""

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import get_session
from dependencies import create_access_token, hash_password
from main import app
from models import Base, Lease, Property, User
from services.dashboard_service import stats_cache
from services.exchange_rate_service import rates_cache

engine = create_engine(
     "sqlite://",
     connect_args={"check_same_thread": False},
     poolclass=StaticPool,
)
TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)

PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def reset_database():
     Base.metadata.create_all(bind=engine)
     stats_cache.clear()
     rates_cache.clear()
     yield
     Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
     session = TestingSession()
     try:
          yield session
     finally:
          session.close()


@pytest.fixture
def client():
     def override_get_session():
          session = TestingSession()
          try:
               yield session
               session.commit()
          except Exception:
               session.rollback()
               raise
          finally:
               session.close()

     app.dependency_overrides[get_session] = override_get_session
     with TestClient(app) as test_client:
          yield test_client
     app.dependency_overrides.clear()


@pytest.fixture(scope="session")
def password_hash():
     return hash_password(PASSWORD)


@pytest.fixture
def make_user(db, password_hash):
     def _make(role: str, name: str = None, email: str = None) -> User:
          count = db.query(User).count() + 1
          user = User(
               name=name or f"{role.title()} {count}",
               email=email or f"{role}{count}@example.com",
               password=password_hash,
               role=role,
               is_active=True,
          )
          db.add(user)
          db.commit()
          return user

     return _make


@pytest.fixture
def landlord(make_user):
     return make_user("landlord", name="Lydia Landlord", email="landlord@example.com")


@pytest.fixture
def other_landlord(make_user):
     return make_user("landlord", name="Oscar Other", email="other@example.com")


@pytest.fixture
def tenant(make_user):
     return make_user("tenant", name="Tom Tenant", email="tenant@example.com")


@pytest.fixture
def manager(make_user):
     return make_user("manager", name="Mary Manager", email="manager@example.com")


@pytest.fixture
def admin(make_user):
     return make_user("admin", name="Adam Admin", email="admin@example.com")


@pytest.fixture
def auth():
     def _headers(user: User) -> dict:
          return {"Authorization": f"Bearer {create_access_token(user)}"}

     return _headers


def actor(user: User) -> dict:
     """The decoded-token dict services receive as the acting user."""
     return {"id": user.id, "role": user.role}


@pytest.fixture
def prop(db, landlord) -> Property:
     prop = Property(
          address="12 Kabulonga Road, Lusaka",
          property_type="House",
          monthly_rent=Decimal("5000.00"),
          bedrooms=3,
          bathrooms=2,
          landlord_id=landlord.id,
          is_available=True,
          images=[],
     )
     db.add(prop)
     db.commit()
     return prop


@pytest.fixture
def active_lease(db, prop, tenant, landlord) -> Lease:
     lease = Lease(
          property_id=prop.id,
          tenant_id=tenant.id,
          landlord_id=landlord.id,
          start_date=date(2025, 1, 1),
          end_date=date(2099, 12, 31),
          monthly_rent=Decimal("5000.00"),
          security_deposit=Decimal("5000.00"),
          payment_due_day=1,
          status="active",
          terms={},
          status_history=[],
     )
     db.add(lease)
     db.commit()
     return lease
