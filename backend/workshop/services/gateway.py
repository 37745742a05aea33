"""Mutation gateway for checklists, budgets and their line items.

Every write goes through here: authorize, validate, then mutate and commit
in one transaction. Nothing is written when authorization or validation
fails. Derived fields (``completed_at``, item totals, budget amounts) are
always computed here and never taken from the caller.
"""
from contextlib import contextmanager
from decimal import Decimal, InvalidOperation

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from workshop.core.errors import WorkshopError, NotFound, ValidationFailed, StoreError
from workshop.core.logging import logger
from workshop.crud.links import deactivate_links
from workshop.crud.resources import get_resource, get_item
from workshop.crud.users import get_profile
from workshop.db.models import Checklist, ChecklistItem, Budget, BudgetItem
from workshop.db.models._mixins import utcnow
from workshop.db.models.checklist import PRIORITIES
from workshop.db.models.user import Role
from workshop.services.policy import Action, Principal, ensure


class _Kind:
    def __init__(self, label, item_model, parent_column, required, item_required):
        self.label = label
        self.item_model = item_model
        self.parent_column = parent_column
        self.required = required
        self.item_required = item_required


KINDS = {
    Checklist: _Kind("Checklist", ChecklistItem, "checklist_id", ("customer_name", "plate", "vehicle_name"), ("item_name", "category")),
    Budget: _Kind("Budget", BudgetItem, "budget_id", ("customer_name", "vehicle_name"), ("service_name",)),
}


@contextmanager
def _unit_of_work(db: Session, op: str, **ctx):
    try:
        yield
        db.commit()
    except WorkshopError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("store_error", op=op, error=type(e).__name__, **ctx)
        raise StoreError(f"{op} failed") from e


def _load(db: Session, model, resource_id: int):
    resource = get_resource(db, model, resource_id)
    if resource is None:
        raise NotFound(KINDS[model].label, f"{model.resource_type} {resource_id} does not exist")
    return resource


# validation ----------------------------------------------------------------

def _require_text(values: dict, fields, partial: bool = True) -> None:
    for f in fields:
        if (f in values or not partial) and (values.get(f) is None or not str(values[f]).strip()):
            raise ValidationFailed(f, "must not be blank")


def _money(field: str, value, positive: bool = False) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationFailed(field, "must be a number")
    if not amount.is_finite():
        raise ValidationFailed(field, "must be a number")
    if amount < 0 or (positive and amount == 0):
        raise ValidationFailed(field, "must be positive" if positive else "must not be negative")
    return amount


def _validate_fields(model, values: dict, partial: bool = True) -> dict:
    _require_text(values, KINDS[model].required, partial=partial)
    if "status" in values and values["status"] not in model.STATUSES:
        raise ValidationFailed("status", f"must be one of {', '.join(model.STATUSES)}")
    if model is Checklist and "priority" in values and values["priority"] not in PRIORITIES:
        raise ValidationFailed("priority", f"must be one of {', '.join(PRIORITIES)}")
    if model is Budget:
        if "discount_amount" in values:
            if values["discount_amount"] is None:
                raise ValidationFailed("discount_amount", "must be a number")
            values["discount_amount"] = _money("discount_amount", values["discount_amount"])
        if values.get("vehicle_year") is not None and not 1900 <= values["vehicle_year"] <= 2100:
            raise ValidationFailed("vehicle_year", "out of range")
    return values


def _validate_item(model, values: dict, prefix: str = "", partial: bool = True) -> dict:
    _require_text({prefix + k: v for k, v in values.items()}, [prefix + f for f in KINDS[model].item_required], partial=partial)
    if model is Budget:
        values.pop("total_price", None)
        if not partial:
            values.setdefault("quantity", Decimal("1"))
            values.setdefault("unit_price", Decimal("0"))
        for f, positive in (("quantity", True), ("unit_price", False)):
            if f in values:
                values[f] = _money(prefix + f, values[f], positive=positive)
    elif "checked" in values and values["checked"] is None:
        values.pop("checked")
    return values


def _new_item(model, values: dict):
    item = KINDS[model].item_model(**values)
    if model is Budget:
        item.recompute_total()
    return item


def _dump(data) -> dict:
    if isinstance(data, BaseModel):
        return data.model_dump(exclude_unset=True)
    return dict(data)


# resources -----------------------------------------------------------------

def create(db: Session, principal: Principal, model, draft):
    """Create a resource owned by ``principal`` (or an assigned mechanic, for admins)."""
    values = _dump(draft)
    items = values.pop("items", []) or []
    owner_id = values.pop("mechanic_id", None) or principal.id
    # never trusted from the caller
    for f in ("status", "completed_at", "total_amount", "final_amount", "budget_number", "id"):
        values.pop(f, None)

    resource = model(mechanic_id=owner_id)
    ensure(principal, Action.create, resource)

    if owner_id != principal.id:
        mechanic = get_profile(db, owner_id)
        if mechanic is None or mechanic.role != Role.mechanic.value:
            raise ValidationFailed("mechanic_id", "unknown mechanic")

    values = _validate_fields(model, values, partial=False)
    item_values = [
        _validate_item(model, _dump(i), prefix=f"items[{n}].", partial=False) for n, i in enumerate(items)
    ]

    with _unit_of_work(db, "create", resource_type=model.resource_type):
        for k, v in values.items():
            setattr(resource, k, v)
        resource.status = model.INITIAL_STATUS
        resource.completed_at = None
        resource.items = [_new_item(model, iv) for iv in item_values]
        if model is Budget:
            resource.discount_amount = values.get("discount_amount", Decimal("0"))
            resource.recompute_amounts()
        db.add(resource)
        db.flush()
        if model is Budget:
            resource.budget_number = f"ORC-{resource.id:06d}"

    logger.info(
        "resource_created",
        resource_type=model.resource_type,
        resource_id=resource.id,
        owner_id=owner_id,
        by=principal.id,
        items=len(item_values),
    )
    return resource


def apply(db: Session, principal: Principal, model, resource_id: int, patch):
    """Apply a partial update. A ``status`` key moves the status machine."""
    values = _dump(patch)
    for f in ("completed_at", "mechanic_id", "items", "total_amount", "final_amount", "budget_number", "id"):
        values.pop(f, None)

    resource = _load(db, model, resource_id)
    ensure(principal, Action.update, resource)
    new_status = values.pop("status", None)
    if new_status is not None and new_status != resource.status:
        ensure(principal, Action.change_status, resource)
        _validate_fields(model, {"status": new_status})
    values = _validate_fields(model, values)

    previous = resource.status
    with _unit_of_work(db, "apply", resource_type=model.resource_type, resource_id=resource_id):
        for k, v in values.items():
            setattr(resource, k, v)
        if new_status is not None:
            resource.transition(new_status, utcnow())
        if model is Budget:
            resource.recompute_amounts()
        resource.updated_at = utcnow()

    if resource.status != previous:
        logger.info(
            "status_changed",
            resource_type=model.resource_type,
            resource_id=resource_id,
            old=previous,
            new=resource.status,
            by=principal.id,
        )
    return resource


def delete(db: Session, principal: Principal, model, resource_id: int) -> None:
    """Hard delete (admin only): items cascade, public links are deactivated."""
    resource = _load(db, model, resource_id)
    ensure(principal, Action.delete, resource)
    with _unit_of_work(db, "delete", resource_type=model.resource_type, resource_id=resource_id):
        deactivated = deactivate_links(db, model.resource_type, resource_id)
        db.delete(resource)
    logger.info(
        "resource_deleted",
        resource_type=model.resource_type,
        resource_id=resource_id,
        links_deactivated=deactivated,
        by=principal.id,
    )


# line items ----------------------------------------------------------------

def _load_item(db: Session, model, resource_id: int, item_id: int):
    kind = KINDS[model]
    item = get_item(db, kind.item_model, kind.parent_column, resource_id, item_id)
    if item is None:
        raise NotFound("Item", f"{model.resource_type} {resource_id} has no item {item_id}")
    return item


def _touch(resource) -> None:
    if isinstance(resource, Budget):
        resource.recompute_amounts()
    resource.updated_at = utcnow()


def add_item(db: Session, principal: Principal, model, resource_id: int, data):
    resource = _load(db, model, resource_id)
    ensure(principal, Action.edit_items, resource)
    values = _validate_item(model, _dump(data), partial=False)
    with _unit_of_work(db, "add_item", resource_type=model.resource_type, resource_id=resource_id):
        item = _new_item(model, values)
        resource.items.append(item)
        _touch(resource)
    return item


def update_item(db: Session, principal: Principal, model, resource_id: int, item_id: int, patch):
    resource = _load(db, model, resource_id)
    ensure(principal, Action.edit_items, resource)
    item = _load_item(db, model, resource_id, item_id)
    values = _validate_item(model, _dump(patch))
    if "checked" in values and values["checked"] != item.checked:
        ensure(principal, Action.check_item, resource)
    with _unit_of_work(db, "update_item", resource_type=model.resource_type, resource_id=resource_id):
        for k, v in values.items():
            setattr(item, k, v)
        if model is Budget:
            item.recompute_total()
        _touch(resource)
    return item


def remove_item(db: Session, principal: Principal, model, resource_id: int, item_id: int) -> None:
    resource = _load(db, model, resource_id)
    ensure(principal, Action.edit_items, resource)
    item = _load_item(db, model, resource_id, item_id)
    with _unit_of_work(db, "remove_item", resource_type=model.resource_type, resource_id=resource_id):
        resource.items.remove(item)
        _touch(resource)


def set_item_checked(db: Session, principal: Principal, checklist_id: int, item_id: int, checked: bool, observation: str | None = None):
    """Toggle one checklist item; the only checklist write open to mechanics after creation."""
    checklist = _load(db, Checklist, checklist_id)
    ensure(principal, Action.check_item, checklist)
    item = _load_item(db, Checklist, checklist_id, item_id)
    with _unit_of_work(db, "check_item", resource_type="checklist", resource_id=checklist_id):
        item.checked = checked
        if observation is not None:
            item.observation = observation
        _touch(checklist)
    return item
