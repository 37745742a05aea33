import datetime as dt
from enum import Enum
from sqlalchemy import String, Text, ForeignKey, DateTime, Numeric, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship
from decimal import Decimal

from workshop.db.base import Base
from workshop.db.models._mixins import TimestampMixin, StatusMachine

class BudgetStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"

Money = Numeric(12, 2)

class Budget(Base, TimestampMixin, StatusMachine):
    __tablename__ = "budget"

    resource_type = "budget"
    STATUSES = tuple(s.value for s in BudgetStatus)
    INITIAL_STATUS = BudgetStatus.pending.value
    TERMINAL_STATUS = BudgetStatus.approved.value

    id: Mapped[int] = mapped_column(primary_key=True)
    budget_number: Mapped[str | None] = mapped_column(String(32), unique=True, nullable=True)
    mechanic_id: Mapped[int] = mapped_column(ForeignKey("user.id", ondelete="RESTRICT"), index=True)

    customer_name: Mapped[str] = mapped_column(String(256))
    vehicle_name: Mapped[str] = mapped_column(String(256))
    vehicle_plate: Mapped[str | None] = mapped_column(String(16), nullable=True)
    vehicle_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    observations: Mapped[str | None] = mapped_column(Text, nullable=True)

    # derived by the mutation gateway from items and discount
    total_amount: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"))
    discount_amount: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"))
    final_amount: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"))

    status: Mapped[str] = mapped_column(String(32), default=BudgetStatus.pending.value, index=True)
    completed_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    mechanic = relationship("Profile", primaryjoin="foreign(Budget.mechanic_id) == Profile.id", viewonly=True)
    items = relationship(
        "BudgetItem",
        back_populates="budget",
        cascade="all, delete-orphan",
        order_by="BudgetItem.id",
    )

    def recompute_amounts(self) -> None:
        total = sum((i.total_price for i in self.items), Decimal("0"))
        self.total_amount = total
        self.final_amount = total - (self.discount_amount or Decimal("0"))

class BudgetItem(Base, TimestampMixin):
    __tablename__ = "budget_item"

    id: Mapped[int] = mapped_column(primary_key=True)
    budget_id: Mapped[int] = mapped_column(ForeignKey("budget.id", ondelete="CASCADE"), index=True)
    service_name: Mapped[str] = mapped_column(String(256))
    service_category: Mapped[str | None] = mapped_column(String(128), nullable=True)
    quantity: Mapped[Decimal] = mapped_column(Numeric(12, 3), default=Decimal("1"))
    unit_price: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"))
    total_price: Mapped[Decimal] = mapped_column(Money, default=Decimal("0"))

    budget = relationship("Budget", back_populates="items")

    def recompute_total(self) -> None:
        self.total_price = (Decimal(self.quantity) * Decimal(self.unit_price)).quantize(Decimal("0.01"))
