import datetime as dt
from sqlalchemy import String, Boolean, ForeignKey, DateTime, Index, text
from sqlalchemy.orm import Mapped, mapped_column

from workshop.db.base import Base
from workshop.db.models._mixins import utcnow

# predicate of the partial unique index; ON CONFLICT must repeat it verbatim
ACTIVE_PREDICATE = text("is_active")

class PublicLink(Base):
    __tablename__ = "public_link"
    __table_args__ = (
        Index(
            "uq_public_link_active_resource",
            "resource_type",
            "resource_id",
            unique=True,
            postgresql_where=ACTIVE_PREDICATE,
            sqlite_where=ACTIVE_PREDICATE,
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    token: Mapped[str] = mapped_column(String(128), unique=True, index=True)
    # weak reference, no FK: the link outlives nothing and owns nothing
    resource_type: Mapped[str] = mapped_column(String(16))
    resource_id: Mapped[int] = mapped_column()
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_by: Mapped[int | None] = mapped_column(ForeignKey("user.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    deactivated_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
