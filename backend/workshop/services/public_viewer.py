"""Token-keyed read path.

Deliberately independent of principals and of ``policy``: possession of an
active token is the credential. Every failure is the same ``NotFound`` so a
caller cannot tell an unknown token from a deactivated one.
"""
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from workshop.core.errors import NotFound, StoreError
from workshop.core.logging import logger
from workshop.crud.links import get_active_link_by_token
from workshop.crud.resources import get_resource
from workshop.db.models import RESOURCE_MODELS
from workshop.db.rls import bind_public_token
from workshop.schemas.public import PublicChecklistOut, PublicBudgetOut

PROJECTIONS = {
    "checklist": PublicChecklistOut,
    "budget": PublicBudgetOut,
}


def _not_found(why: str) -> NotFound:
    return NotFound("Link", why)


def resolve(db: Session, resource_type: str, token: str) -> PublicChecklistOut | PublicBudgetOut:
    model = RESOURCE_MODELS.get(resource_type)
    if model is None or not token:
        raise _not_found("unknown resource type or empty token")
    bind_public_token(db, token)
    try:
        link = get_active_link_by_token(db, token)
        if link is None or link.resource_type != resource_type:
            raise _not_found("no active link for token")
        resource = get_resource(db, model, link.resource_id)
        if resource is None:
            raise _not_found(f"link {link.id} points at a missing {resource_type}")
        snapshot = PROJECTIONS[resource_type].from_model(resource)
    except SQLAlchemyError as e:
        logger.error("public_view_failed", resource_type=resource_type, error=type(e).__name__)
        raise StoreError("public view failed") from e
    logger.info("public_view", resource_type=resource_type, link_id=link.id)
    return snapshot


def snapshot_of(resource) -> PublicChecklistOut | PublicBudgetOut:
    """Projection of an already loaded resource (used by PDF export)."""
    return PROJECTIONS[resource.resource_type].from_model(resource)
