import datetime as dt
from decimal import Decimal
from pydantic import BaseModel, ConfigDict

from workshop.schemas.checklists import MechanicOut


class BudgetItemIn(BaseModel):
    service_name: str
    service_category: str | None = None
    quantity: Decimal = Decimal("1")
    unit_price: Decimal = Decimal("0")
    # accepted for compatibility, always recomputed
    total_price: Decimal | None = None


class BudgetItemUpdate(BaseModel):
    service_name: str | None = None
    service_category: str | None = None
    quantity: Decimal | None = None
    unit_price: Decimal | None = None
    total_price: Decimal | None = None


class BudgetCreate(BaseModel):
    customer_name: str
    vehicle_name: str
    vehicle_plate: str | None = None
    vehicle_year: int | None = None
    observations: str | None = None
    discount_amount: Decimal = Decimal("0")
    mechanic_id: int | None = None
    items: list[BudgetItemIn] = []


class BudgetUpdate(BaseModel):
    customer_name: str | None = None
    vehicle_name: str | None = None
    vehicle_plate: str | None = None
    vehicle_year: int | None = None
    observations: str | None = None
    discount_amount: Decimal | None = None
    status: str | None = None


class BudgetItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    service_name: str
    service_category: str | None = None
    quantity: Decimal
    unit_price: Decimal
    total_price: Decimal


class BudgetOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    budget_number: str | None = None
    mechanic_id: int
    customer_name: str
    vehicle_name: str
    vehicle_plate: str | None = None
    vehicle_year: int | None = None
    observations: str | None = None
    total_amount: Decimal
    discount_amount: Decimal
    final_amount: Decimal
    status: str
    created_at: dt.datetime
    updated_at: dt.datetime
    completed_at: dt.datetime | None = None
    items: list[BudgetItemOut] = []
    mechanic: MechanicOut | None = None
