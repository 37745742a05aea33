import datetime as dt
from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from workshop.core.errors import LinkCreationFailed
from workshop.db.models._mixins import utcnow
from workshop.db.models.public_link import PublicLink, ACTIVE_PREDICATE

_INSERTS = {"postgresql": pg_insert, "sqlite": sqlite_insert}

def _insert_for(db: Session):
    dialect = db.get_bind().dialect.name
    try:
        return _INSERTS[dialect]
    except KeyError:
        raise LinkCreationFailed(f"no atomic upsert for dialect {dialect}")

def get_active_link(db: Session, resource_type: str, resource_id: int) -> PublicLink | None:
    stmt = (
        select(PublicLink)
        .where(
            PublicLink.resource_type == resource_type,
            PublicLink.resource_id == resource_id,
            PublicLink.is_active.is_(True),
        )
        .execution_options(populate_existing=True)
    )
    return db.execute(stmt).scalar_one_or_none()

def get_active_link_by_token(db: Session, token: str) -> PublicLink | None:
    stmt = select(PublicLink).where(PublicLink.token == token, PublicLink.is_active.is_(True))
    return db.execute(stmt).scalar_one_or_none()

def get_or_create_active_link(db: Session, resource_type: str, resource_id: int, token: str, created_by: int | None) -> PublicLink:
    """Insert an active link unless one exists, then return the active row.

    The partial unique index on (resource_type, resource_id) WHERE is_active
    arbitrates concurrent callers: the losing insert becomes a no-op.
    """
    stmt = (
        _insert_for(db)(PublicLink)
        .values(
            token=token,
            resource_type=resource_type,
            resource_id=resource_id,
            is_active=True,
            created_by=created_by,
            created_at=utcnow(),
        )
        .on_conflict_do_nothing(
            index_elements=[PublicLink.resource_type, PublicLink.resource_id],
            index_where=ACTIVE_PREDICATE,
        )
    )
    db.execute(stmt)
    link = get_active_link(db, resource_type, resource_id)
    if link is None:
        # only possible if a concurrent caller deactivated it in between
        raise LookupError(f"active link for {resource_type}/{resource_id} vanished")
    return link

def deactivate_links(db: Session, resource_type: str, resource_id: int, when: dt.datetime | None = None) -> int:
    stmt = (
        update(PublicLink)
        .where(
            PublicLink.resource_type == resource_type,
            PublicLink.resource_id == resource_id,
            PublicLink.is_active.is_(True),
        )
        .values(is_active=False, deactivated_at=when or utcnow())
        .execution_options(synchronize_session=False)
    )
    return db.execute(stmt).rowcount
