import datetime as dt
from sqlalchemy import DateTime, func
from sqlalchemy.orm import Mapped, mapped_column


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class TimestampMixin:
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now()
    )


class StatusMachine:
    """Shared status contract of checklists and budgets.

    Subclasses declare ``resource_type``, the allowed ``STATUSES``, the
    ``INITIAL_STATUS`` and the single ``TERMINAL_STATUS``. ``completed_at``
    is set iff ``status == TERMINAL_STATUS``; only the mutation gateway
    writes either column.
    """

    @property
    def owner_id(self) -> int:
        return self.mechanic_id

    @property
    def is_terminal(self) -> bool:
        return self.status == self.TERMINAL_STATUS

    def transition(self, new_status: str, now: dt.datetime) -> bool:
        """Move to ``new_status``; returns True if the status changed."""
        if new_status == self.status:
            # re-asserting the terminal state keeps the original timestamp
            if new_status == self.TERMINAL_STATUS and self.completed_at is None:
                self.completed_at = now
            return False
        self.status = new_status
        self.completed_at = now if new_status == self.TERMINAL_STATUS else None
        return True
