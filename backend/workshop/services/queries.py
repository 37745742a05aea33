from sqlalchemy.orm import Session

from workshop.core.errors import NotFound
from workshop.crud.resources import get_resource, list_resources, count_by_status
from workshop.db.models import Checklist, Budget
from workshop.services.policy import Action, Principal, ensure, scope_query


def fetch(db: Session, principal: Principal, model, resource_id: int, action: Action = Action.read):
    resource = get_resource(db, model, resource_id)
    if resource is None:
        raise NotFound(model.__name__, f"{model.resource_type} {resource_id} does not exist")
    ensure(principal, action, resource)
    return resource


def list_for(db: Session, principal: Principal, model, status: str | None = None, search: str | None = None):
    return list_resources(db, scope_query(principal, db.query(model), model), model, status=status, search=search)


def dashboard(db: Session, principal: Principal) -> dict:
    return {
        model.resource_type: count_by_status(scope_query(principal, db.query(model), model), model)
        for model in (Checklist, Budget)
    }
