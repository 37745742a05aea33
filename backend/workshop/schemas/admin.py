from pydantic import BaseModel, Field
from workshop.db.models.user import Role

class UserCreateIn(BaseModel):
    email: str = Field(..., min_length=3, max_length=256)
    password: str = Field(..., min_length=6, max_length=128)
    role: Role = Role.mechanic
    full_name: str | None = None
    username: str | None = Field(None, min_length=3, max_length=64)

class RoleUpdateIn(BaseModel):
    role: Role
