import pytest

from workshop.core.errors import Denied
from workshop.db.models import Checklist, Budget
from workshop.schemas.checklists import ChecklistOut
from workshop.services.policy import Action, Principal, authorize, ensure, redact, visible_fields

ADMIN = Principal(id=1, role="admin")
MEC = Principal(id=2, role="mechanic")
OTHER = Principal(id=3, role="mechanic")

def _checklist(owner=2, status="in_progress"):
    return Checklist(mechanic_id=owner, status=status)

def _budget(owner=2, status="pending"):
    return Budget(mechanic_id=owner, status=status)

@pytest.mark.parametrize("action", list(Action))
def test_admin_may_do_everything(action):
    assert authorize(ADMIN, action, _checklist(owner=99, status="completed"))
    assert authorize(ADMIN, action, _budget(owner=99, status="approved"))

@pytest.mark.parametrize("action", [a for a in Action if a != Action.create])
def test_mechanic_never_touches_foreign_resources(action):
    decision = authorize(OTHER, action, _checklist())
    assert not decision
    assert not authorize(OTHER, action, _budget())

def test_foreign_read_reason():
    assert authorize(OTHER, Action.read, _checklist()).reason == "not the owner"

def test_mechanic_never_deletes_even_own():
    assert not authorize(MEC, Action.delete, _checklist())
    assert not authorize(MEC, Action.delete, _budget())

def test_mechanic_creates_only_for_self():
    assert authorize(MEC, Action.create, _checklist(owner=2))
    assert authorize(MEC, Action.create, _checklist(owner=None))
    assert not authorize(MEC, Action.create, _checklist(owner=3))

def test_budget_locked_for_mechanic_after_pending():
    assert authorize(MEC, Action.update, _budget())
    assert authorize(MEC, Action.change_status, _budget())
    for status in ("approved", "rejected"):
        assert not authorize(MEC, Action.update, _budget(status=status))
        assert not authorize(MEC, Action.change_status, _budget(status=status))
        # still readable and shareable
        assert authorize(MEC, Action.read, _budget(status=status))
        assert authorize(MEC, Action.share, _budget(status=status))

def test_checklist_status_is_admin_only():
    assert not authorize(MEC, Action.change_status, _checklist())
    assert authorize(MEC, Action.update, _checklist())

def test_mechanic_checks_items_until_completed():
    assert authorize(MEC, Action.check_item, _checklist())
    assert not authorize(MEC, Action.check_item, _checklist(status="completed"))
    assert not authorize(MEC, Action.check_item, _budget())

def test_unauthenticated_and_unknown_roles_rejected():
    assert authorize(None, Action.read, _checklist()).reason == "unauthenticated"
    assert not authorize(Principal(id=2, role="customer"), Action.read, _checklist())

def test_ensure_raises_denied_with_reason():
    with pytest.raises(Denied) as e:
        ensure(OTHER, Action.update, _checklist())
    assert e.value.reason == "not the owner"
    ensure(MEC, Action.update, _checklist())

def test_mechanic_does_not_see_mechanic_field():
    assert visible_fields(ADMIN, ["mechanic", "status"]) == {"mechanic", "status"}
    assert visible_fields(MEC, ["mechanic", "status"]) == {"status"}

def test_redact_blanks_hidden_fields():
    out = ChecklistOut.model_validate({
        "id": 1, "mechanic_id": 2, "customer_name": "c", "plate": "p", "vehicle_name": "v",
        "priority": "low", "status": "in_progress", "created_at": "2025-01-01T00:00:00Z",
        "updated_at": "2025-01-01T00:00:00Z", "mechanic": {"id": 2, "full_name": "Marcos"},
    })
    assert redact(ADMIN, out).mechanic.full_name == "Marcos"
    assert redact(MEC, out).mechanic is None

def test_completed_checklist_items_are_frozen_for_mechanic():
    assert authorize(MEC, Action.edit_items, _checklist())
    assert not authorize(MEC, Action.edit_items, _checklist(status="completed"))
    assert authorize(ADMIN, Action.edit_items, _checklist(status="completed"))
    assert authorize(MEC, Action.edit_items, _budget())
    assert not authorize(MEC, Action.edit_items, _budget(status="approved"))
