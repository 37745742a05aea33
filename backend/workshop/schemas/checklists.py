import datetime as dt
from pydantic import BaseModel, ConfigDict, computed_field


class MechanicOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str | None = None


class ProgressOut(BaseModel):
    checked: int
    total: int

    @computed_field
    @property
    def label(self) -> str:
        return f"{self.checked}/{self.total}"

    @computed_field
    @property
    def percent(self) -> float:
        return round(self.checked * 100.0 / self.total, 1) if self.total else 0.0

    @classmethod
    def of(cls, items) -> "ProgressOut":
        items = list(items)
        return cls(checked=sum(1 for i in items if i.checked), total=len(items))


class ChecklistItemIn(BaseModel):
    item_name: str
    category: str
    checked: bool = False
    observation: str | None = None


class ChecklistItemUpdate(BaseModel):
    item_name: str | None = None
    category: str | None = None
    checked: bool | None = None
    observation: str | None = None


class ItemCheckIn(BaseModel):
    checked: bool
    observation: str | None = None


class ChecklistCreate(BaseModel):
    customer_name: str
    plate: str
    vehicle_name: str
    priority: str = "medium"
    general_observations: str | None = None
    video_url: str | None = None
    # only admins may assign another mechanic
    mechanic_id: int | None = None
    items: list[ChecklistItemIn] = []


class ChecklistUpdate(BaseModel):
    customer_name: str | None = None
    plate: str | None = None
    vehicle_name: str | None = None
    priority: str | None = None
    general_observations: str | None = None
    video_url: str | None = None
    status: str | None = None


class ChecklistItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    item_name: str
    category: str
    checked: bool
    observation: str | None = None


class ChecklistOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    mechanic_id: int
    customer_name: str
    plate: str
    vehicle_name: str
    priority: str
    general_observations: str | None = None
    video_url: str | None = None
    status: str
    created_at: dt.datetime
    updated_at: dt.datetime
    completed_at: dt.datetime | None = None
    items: list[ChecklistItemOut] = []
    mechanic: MechanicOut | None = None

    @computed_field
    @property
    def progress(self) -> ProgressOut:
        return ProgressOut.of(self.items)
