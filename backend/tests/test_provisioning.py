import pytest
from pydantic import ValidationError
from sqlalchemy.exc import OperationalError

from workshop.core.errors import Denied, ProvisioningFailed, ValidationFailed
from workshop.crud import users as users_crud
from workshop.db.models.user import Role
from workshop.schemas.admin import UserCreateIn
from workshop.schemas.auth import ProfileUpdateIn
from workshop.services.provisioning import provision_user, update_own_profile, set_role


def _new(**kw):
    data = {"email": "Nova@Example.com", "password": "secret123", "full_name": "Nova", "username": "nova"}
    data.update(kw)
    return UserCreateIn(**data)

def test_admin_provisions_mechanic(db, admin):
    profile = provision_user(db, admin, _new())
    assert profile.role == "mechanic"
    user = users_crud.get_user_by_email(db, "nova@example.com")
    assert user.id == profile.id
    assert user.profile.full_name == "Nova"

def test_admin_provisions_admin(db, admin):
    assert provision_user(db, admin, _new(role=Role.admin)).role == "admin"

def test_mechanic_cannot_provision(db, admin, mechanic):
    with pytest.raises(Denied):
        provision_user(db, mechanic, _new())
    assert users_crud.get_user_by_email(db, "nova@example.com") is None

def test_duplicate_email_rejected(db, admin, mechanic):
    with pytest.raises(ValidationFailed) as e:
        provision_user(db, admin, _new(email="MEC@example.com"))
    assert e.value.field == "email"

def test_profile_failure_removes_identity(db, admin, mechanic):
    # "mec" is already taken by the mechanic fixture
    with pytest.raises(ProvisioningFailed):
        provision_user(db, admin, _new(username="mec"))
    assert users_crud.get_user_by_email(db, "nova@example.com") is None

def test_profile_store_error_removes_identity(db, admin, monkeypatch):
    def boom(*a, **kw):
        raise OperationalError("INSERT", {}, Exception("down"))

    monkeypatch.setattr(users_crud, "write_profile", boom)
    with pytest.raises(ProvisioningFailed):
        provision_user(db, admin, _new())
    assert users_crud.get_user_by_email(db, "nova@example.com") is None
    assert len(users_crud.list_users(db)) == 1

def test_self_service_cannot_carry_role():
    with pytest.raises(ValidationError):
        ProfileUpdateIn(full_name="X", role="admin")

def test_self_service_updates_display_fields(db, mechanic):
    profile = update_own_profile(db, mechanic, ProfileUpdateIn(full_name="Marcos S."))
    assert profile.full_name == "Marcos S."
    assert profile.username == "mec"
    assert profile.role == "mechanic"

def test_self_service_username_conflict(db, mechanic, other_mechanic):
    with pytest.raises(ValidationFailed) as e:
        update_own_profile(db, mechanic, ProfileUpdateIn(username="other"))
    assert e.value.field == "username"

def test_role_changes_are_admin_only(db, admin, mechanic, other_mechanic):
    with pytest.raises(Denied):
        set_role(db, mechanic, other_mechanic.id, "admin")
    assert set_role(db, admin, other_mechanic.id, "admin").role == "admin"
