import os

os.environ.setdefault("ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SEED_DEMO", "false")

import pytest
from sqlalchemy.orm import sessionmaker

from workshop.core.config import settings
from workshop.core.security import create_access_token
from workshop.crud.users import create_identity, write_profile
from workshop.db.base import Base
from workshop.db.session import build_engine
from workshop.db.models import Checklist, Budget
from workshop.db.models.user import Role
from workshop.schemas.budgets import BudgetCreate, BudgetItemIn
from workshop.schemas.checklists import ChecklistCreate, ChecklistItemIn
from workshop.services import gateway
from workshop.services.policy import Principal


@pytest.fixture
def engine(tmp_path):
    eng = build_engine(f"sqlite:///{tmp_path / 'workshop.db'}")
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    s = session_factory()
    try:
        yield s
    finally:
        s.close()


def make_principal(db, email: str, role: Role, full_name: str) -> Principal:
    u = create_identity(db, email, "secret123")
    write_profile(db, u.id, full_name, email.split("@")[0], role.value)
    return Principal(id=u.id, role=role.value)


@pytest.fixture
def admin(db):
    return make_principal(db, "admin@example.com", Role.admin, "Ana Admin")


@pytest.fixture
def mechanic(db):
    return make_principal(db, "mec@example.com", Role.mechanic, "Marcos Mecânico")


@pytest.fixture
def other_mechanic(db):
    return make_principal(db, "other@example.com", Role.mechanic, "Otto Outro")


def checklist_draft(n_items: int = 5, **kw) -> ChecklistCreate:
    return ChecklistCreate(
        customer_name=kw.pop("customer_name", "João Silva"),
        plate=kw.pop("plate", "ABC1D23"),
        vehicle_name=kw.pop("vehicle_name", "Fiat Uno"),
        items=[ChecklistItemIn(item_name=f"Item {i}", category="Freios" if i % 2 else "Motor") for i in range(n_items)],
        **kw,
    )


def budget_draft(**kw) -> BudgetCreate:
    items = kw.pop("items", None) or [
        BudgetItemIn(service_name="Troca de óleo", service_category="Motor", quantity="2", unit_price="45.50"),
        BudgetItemIn(service_name="Alinhamento", quantity="1", unit_price="80"),
    ]
    return BudgetCreate(customer_name="Maria", vehicle_name="Gol", vehicle_plate="XYZ9876", items=items, **kw)


@pytest.fixture
def make_checklist(db):
    def _make(principal, **kw):
        return gateway.create(db, principal, Checklist, checklist_draft(**kw))
    return _make


@pytest.fixture
def make_budget(db):
    def _make(principal, **kw):
        return gateway.create(db, principal, Budget, budget_draft(**kw))
    return _make


@pytest.fixture
def client(session_factory, tmp_path, monkeypatch):
    from fastapi.testclient import TestClient
    from workshop.core.deps import get_db
    from workshop.main import app

    monkeypatch.setattr(settings, "EXPORT_DIR", str(tmp_path / "exports"))

    def _get_db():
        s = session_factory()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def auth(principal: Principal) -> dict:
    return {"Authorization": f"Bearer {create_access_token(principal.id, principal.role)}"}
