"""Role-based access control.

Pure decision functions: no I/O, no session. ``authorize`` answers whether
a principal may perform an action on a resource; callers gate every write
on it. Store-side row-level security (migration 0001) is the second
authority and does not depend on this module.

Role matrix:

* admin - every action on every resource, sees the owning mechanic.
* mechanic - own resources only; never deletes; budgets are editable and
  transitionable only while pending; checklist status is admin-only, and
  once a checklist is completed its items are frozen for mechanics.
"""
from dataclasses import dataclass
from enum import Enum

from workshop.core.errors import Denied
from workshop.db.models.user import Role


class Action(str, Enum):
    read = "read"
    create = "create"
    update = "update"
    delete = "delete"
    change_status = "change_status"
    share = "share"
    check_item = "check_item"
    edit_items = "edit_items"
    export = "export"


@dataclass(frozen=True)
class Principal:
    id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == Role.admin.value


@dataclass(frozen=True)
class Allowed:
    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True)
class Rejected:
    reason: str

    def __bool__(self) -> bool:
        return False


Decision = Allowed | Rejected
ALLOWED = Allowed()

# actions a mechanic may take on a resource they own, before status rules
_OWNER_ACTIONS = {
    Action.read, Action.update, Action.change_status, Action.share, Action.check_item, Action.edit_items, Action.export,
}

# fields that expose other principals
HIDDEN_FROM_MECHANIC = frozenset({"mechanic"})


def authorize(principal: Principal | None, action: Action, resource) -> Decision:
    if principal is None:
        return Rejected("unauthenticated")
    if principal.is_admin:
        return ALLOWED
    if principal.role != Role.mechanic.value:
        return Rejected(f"unknown role {principal.role!r}")

    if action == Action.create:
        if resource.mechanic_id not in (None, principal.id):
            return Rejected("mechanics create resources for themselves only")
        return ALLOWED
    if action == Action.delete:
        return Rejected("only admins delete")
    if resource.owner_id != principal.id:
        return Rejected("not the owner")
    if action not in _OWNER_ACTIONS:
        return Rejected(f"unsupported action {action.value}")

    if resource.resource_type == "budget":
        if action in (Action.update, Action.change_status, Action.edit_items) and resource.status != resource.INITIAL_STATUS:
            return Rejected("budget is no longer pending")
        if action == Action.check_item:
            return Rejected("budgets have no checks")
    elif resource.resource_type == "checklist":
        if action == Action.change_status:
            return Rejected("checklist status is set by admins")
        if action in (Action.check_item, Action.edit_items) and resource.is_terminal:
            return Rejected("checklist is already completed")
    return ALLOWED


def ensure(principal: Principal | None, action: Action, resource) -> None:
    decision = authorize(principal, action, resource)
    if not decision:
        raise Denied(decision.reason)


def ensure_admin(principal: Principal | None) -> None:
    if principal is None or not principal.is_admin:
        raise Denied("admin only")


def visible_fields(principal: Principal, fields) -> set[str]:
    if principal.is_admin:
        return set(fields)
    return set(fields) - HIDDEN_FROM_MECHANIC


def redact(principal: Principal, out):
    """Blank the fields a principal may not see on a pydantic output model."""
    hidden = set(type(out).model_fields) - visible_fields(principal, type(out).model_fields)
    if not hidden:
        return out
    return out.model_copy(update={f: None for f in hidden})


def scope_query(principal: Principal, query, model):
    if principal.is_admin:
        return query
    return query.filter(model.mechanic_id == principal.id)
