from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from workshop.core.deps import get_db, require_roles
from workshop.db.models.user import Role
from workshop.schemas.admin import UserCreateIn, RoleUpdateIn
from workshop.schemas.auth import UserOut
from workshop.crud.users import list_users, get_user
from workshop.services.provisioning import provision_user, set_role
from workshop.api.routers.auth import user_out

router = APIRouter()

@router.get("/users", response_model=list[UserOut])
def users(db: Session = Depends(get_db), _admin=Depends(require_roles(Role.admin))):
    return [user_out(u) for u in list_users(db) if u.profile is not None]

@router.post("/users", response_model=UserOut, status_code=201)
def create_user_endpoint(data: UserCreateIn, db: Session = Depends(get_db), admin=Depends(require_roles(Role.admin))):
    profile = provision_user(db, admin, data)
    return user_out(get_user(db, profile.id))

@router.put("/users/{user_id}/role", response_model=UserOut)
def put_role(user_id: int, data: RoleUpdateIn, db: Session = Depends(get_db), admin=Depends(require_roles(Role.admin))):
    set_role(db, admin, user_id, data.role.value)
    return user_out(get_user(db, user_id))
