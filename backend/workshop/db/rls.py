"""Row-level security bindings.

PostgreSQL policies (see migration 0001) read ``app.user_id``,
``app.user_role`` and ``app.public_token``. They are transaction-local, so
they are stored on ``Session.info`` and re-applied at the start of every
transaction. On other dialects this is a no-op.
"""
from sqlalchemy import event, text
from sqlalchemy.orm import Session

_KEY = "rls"


def bind_principal(db: Session, user_id: int, role: str) -> None:
    db.info[_KEY] = {"app.user_id": str(user_id), "app.user_role": role}
    _apply_now(db)


def bind_public_token(db: Session, token: str) -> None:
    db.info[_KEY] = {"app.public_token": token}
    _apply_now(db)


def bind_service(db: Session) -> None:
    """Full access for seeding and provisioning."""
    db.info[_KEY] = {"app.user_role": "admin"}
    _apply_now(db)


def _set(connection, values: dict) -> None:
    if connection.dialect.name != "postgresql":
        return
    for name, value in values.items():
        connection.execute(text("select set_config(:name, :value, true)"), {"name": name, "value": value})


def _apply_now(db: Session) -> None:
    if db.in_transaction():
        _set(db.connection(), db.info[_KEY])


@event.listens_for(Session, "after_begin")
def _after_begin(session: Session, _transaction, connection) -> None:
    values = session.info.get(_KEY)
    if values:
        _set(connection, values)
