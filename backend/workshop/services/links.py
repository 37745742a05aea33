"""Public link issuer.

A link is a capability: whoever holds the token can read one resource.
Tokens are random, carry no resource information and stay stable until
the link is deactivated.
"""
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from workshop.core.config import settings
from workshop.core.errors import NotFound, LinkCreationFailed, StoreError
from workshop.core.logging import logger
from workshop.core.security import new_public_token
from workshop.crud import links as links_crud
from workshop.crud.resources import get_resource
from workshop.db.models import RESOURCE_MODELS
from workshop.db.models.public_link import PublicLink
from workshop.services.policy import Action, Principal, ensure


def resource_model(resource_type: str):
    model = RESOURCE_MODELS.get(resource_type)
    if model is None:
        raise NotFound("Resource", f"unknown resource type {resource_type!r}")
    return model


def public_url(resource_type: str, token: str) -> str:
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/public/{resource_type}/{token}"


def _load_shareable(db: Session, principal: Principal, resource_type: str, resource_id: int):
    model = resource_model(resource_type)
    resource = get_resource(db, model, resource_id)
    if resource is None:
        raise NotFound(model.__name__, f"{resource_type} {resource_id} does not exist")
    ensure(principal, Action.share, resource)
    return resource


def get_or_create_link(db: Session, principal: Principal, resource_type: str, resource_id: int) -> PublicLink:
    _load_shareable(db, principal, resource_type, resource_id)
    try:
        link = links_crud.get_or_create_active_link(
            db, resource_type, resource_id, token=new_public_token(), created_by=principal.id
        )
        db.commit()
    except (SQLAlchemyError, LookupError) as e:
        db.rollback()
        logger.error("public_link_failed", resource_type=resource_type, resource_id=resource_id, error=type(e).__name__)
        raise LinkCreationFailed(f"could not issue link for {resource_type} {resource_id}") from e
    logger.info("public_link_issued", resource_type=resource_type, resource_id=resource_id, link_id=link.id, by=principal.id)
    return link


def deactivate_link(db: Session, principal: Principal, resource_type: str, resource_id: int) -> int:
    """Flip the active link (if any) to inactive. Rows are kept."""
    _load_shareable(db, principal, resource_type, resource_id)
    try:
        count = links_crud.deactivate_links(db, resource_type, resource_id)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("public_link_deactivate_failed", resource_type=resource_type, resource_id=resource_id, error=type(e).__name__)
        raise StoreError("could not deactivate link") from e
    logger.info("public_link_deactivated", resource_type=resource_type, resource_id=resource_id, count=count, by=principal.id)
    return count
