"""Read-only projections served to token holders.

Frozen, flattened, and limited to what a customer may see: no ids of
principals, only the mechanic's display name.
"""
import datetime as dt
from decimal import Decimal
from typing import Literal
from pydantic import BaseModel, ConfigDict

from workshop.schemas.checklists import ProgressOut


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)


class PublicChecklistItem(_Frozen):
    item_name: str
    category: str
    checked: bool
    observation: str | None = None


class PublicChecklistOut(_Frozen):
    resource_type: Literal["checklist"] = "checklist"
    customer_name: str
    plate: str
    vehicle_name: str
    priority: str
    status: str
    general_observations: str | None = None
    video_url: str | None = None
    created_at: dt.datetime
    completed_at: dt.datetime | None = None
    mechanic_name: str | None = None
    items: tuple[PublicChecklistItem, ...] = ()
    progress: ProgressOut

    @classmethod
    def from_model(cls, c) -> "PublicChecklistOut":
        return cls(
            customer_name=c.customer_name,
            plate=c.plate,
            vehicle_name=c.vehicle_name,
            priority=c.priority,
            status=c.status,
            general_observations=c.general_observations,
            video_url=c.video_url,
            created_at=c.created_at,
            completed_at=c.completed_at,
            mechanic_name=c.mechanic.full_name if c.mechanic else None,
            items=tuple(PublicChecklistItem.model_validate(i) for i in c.items),
            progress=ProgressOut.of(c.items),
        )


class PublicBudgetItem(_Frozen):
    service_name: str
    service_category: str | None = None
    quantity: Decimal
    unit_price: Decimal
    total_price: Decimal


class PublicBudgetOut(_Frozen):
    resource_type: Literal["budget"] = "budget"
    budget_number: str | None = None
    customer_name: str
    vehicle_name: str
    vehicle_plate: str | None = None
    vehicle_year: int | None = None
    status: str
    observations: str | None = None
    created_at: dt.datetime
    completed_at: dt.datetime | None = None
    mechanic_name: str | None = None
    items: tuple[PublicBudgetItem, ...] = ()
    total_amount: Decimal
    discount_amount: Decimal
    final_amount: Decimal

    @classmethod
    def from_model(cls, b) -> "PublicBudgetOut":
        return cls(
            budget_number=b.budget_number,
            customer_name=b.customer_name,
            vehicle_name=b.vehicle_name,
            vehicle_plate=b.vehicle_plate,
            vehicle_year=b.vehicle_year,
            status=b.status,
            observations=b.observations,
            created_at=b.created_at,
            completed_at=b.completed_at,
            mechanic_name=b.mechanic.full_name if b.mechanic else None,
            items=tuple(PublicBudgetItem.model_validate(i) for i in b.items),
            total_amount=b.total_amount,
            discount_amount=b.discount_amount,
            final_amount=b.final_amount,
        )


class PublicLinkOut(BaseModel):
    resource_type: str
    resource_id: int
    token: str
    url: str
    is_active: bool
