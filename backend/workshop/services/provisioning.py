"""User provisioning.

Creating a principal is two writes: the login identity, then the profile
carrying role and display name. If the profile write fails the identity is
deleted again so no half-provisioned account is left behind.
"""
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from workshop.core.errors import NotFound, ProvisioningFailed, StoreError, ValidationFailed
from workshop.core.logging import logger
from workshop.crud import users as users_crud
from workshop.db.models.user import Profile
from workshop.schemas.admin import UserCreateIn
from workshop.schemas.auth import ProfileUpdateIn
from workshop.services.policy import Principal, ensure_admin


def provision_user(db: Session, admin: Principal, data: UserCreateIn) -> Profile:
    ensure_admin(admin)
    if users_crud.get_user_by_email(db, data.email):
        raise ValidationFailed("email", "already registered")

    try:
        user = users_crud.create_identity(db, data.email, data.password)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("identity_create_failed", email=data.email, error=type(e).__name__)
        raise ProvisioningFailed("could not create identity") from e

    try:
        profile = users_crud.write_profile(db, user.id, data.full_name, data.username, data.role.value)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("profile_write_failed", user_id=user.id, error=type(e).__name__)
        try:
            users_crud.delete_identity(db, user.id)
        except SQLAlchemyError as e2:
            db.rollback()
            logger.error("identity_rollback_failed", user_id=user.id, error=type(e2).__name__)
            raise StoreError("could not roll back identity") from e2
        raise ProvisioningFailed("could not write user profile") from e

    logger.info("user_provisioned", user_id=user.id, role=profile.role, by=admin.id)
    return profile


def update_own_profile(db: Session, principal: Principal, data: ProfileUpdateIn) -> Profile:
    """Self-service edit. Only display fields; the role never changes here."""
    profile = users_crud.get_profile(db, principal.id)
    if profile is None:
        raise NotFound("User")
    values = data.model_dump(exclude_unset=True)
    try:
        for k, v in values.items():
            setattr(profile, k, v)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ValidationFailed("username", "already taken") from e
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreError("profile update failed") from e
    return profile


def set_role(db: Session, admin: Principal, user_id: int, role: str) -> Profile:
    ensure_admin(admin)
    profile = users_crud.get_profile(db, user_id)
    if profile is None:
        raise NotFound("User")
    previous = profile.role
    try:
        profile.role = role
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreError("role update failed") from e
    logger.info("role_changed", user_id=user_id, old=previous, new=role, by=admin.id)
    return profile
