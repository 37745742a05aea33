import datetime as dt
from enum import Enum
from sqlalchemy import String, Text, Boolean, ForeignKey, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workshop.db.base import Base
from workshop.db.models._mixins import TimestampMixin, StatusMachine

class ChecklistStatus(str, Enum):
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"

PRIORITIES = ("low", "medium", "high")

class Checklist(Base, TimestampMixin, StatusMachine):
    __tablename__ = "checklist"

    resource_type = "checklist"
    STATUSES = tuple(s.value for s in ChecklistStatus)
    INITIAL_STATUS = ChecklistStatus.in_progress.value
    TERMINAL_STATUS = ChecklistStatus.completed.value

    id: Mapped[int] = mapped_column(primary_key=True)
    mechanic_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="RESTRICT"), index=True)

    customer_name: Mapped[str] = mapped_column(String(256))
    plate: Mapped[str] = mapped_column(String(16), index=True)
    vehicle_name: Mapped[str] = mapped_column(String(256))
    priority: Mapped[str] = mapped_column(String(16), default="medium")
    general_observations: Mapped[str | None] = mapped_column(Text, nullable=True)
    video_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    status: Mapped[str] = mapped_column(String(32), default=ChecklistStatus.in_progress.value, index=True)
    completed_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    mechanic = relationship("Profile", primaryjoin="foreign(Checklist.mechanic_id) == Profile.id", viewonly=True)
    items = relationship(
        "ChecklistItem",
        back_populates="checklist",
        cascade="all, delete-orphan",
        order_by="ChecklistItem.id",
    )

    @property
    def progress(self) -> tuple[int, int]:
        return sum(1 for i in self.items if i.checked), len(self.items)

class ChecklistItem(Base, TimestampMixin):
    __tablename__ = "checklist_item"

    id: Mapped[int] = mapped_column(primary_key=True)
    checklist_id: Mapped[int] = mapped_column(ForeignKey("checklist.id", ondelete="CASCADE"), index=True)
    item_name: Mapped[str] = mapped_column(String(256))
    category: Mapped[str] = mapped_column(String(128))
    checked: Mapped[bool] = mapped_column(Boolean, default=False)
    observation: Mapped[str | None] = mapped_column(Text, nullable=True)

    checklist = relationship("Checklist", back_populates="items")
