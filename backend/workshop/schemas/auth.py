from pydantic import BaseModel, ConfigDict, Field

class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"

class LoginIn(BaseModel):
    email: str
    password: str

class UserOut(BaseModel):
    id: int
    email: str
    full_name: str | None = None
    username: str | None = None
    role: str

class ProfileUpdateIn(BaseModel):
    # role is deliberately absent; extra keys are rejected
    model_config = ConfigDict(extra="forbid")

    full_name: str | None = Field(None, max_length=256)
    username: str | None = Field(None, min_length=3, max_length=64)
