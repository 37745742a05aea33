from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from workshop.core.deps import get_db, get_current_principal
from workshop.schemas.auth import LoginIn, TokenOut, UserOut, ProfileUpdateIn
from workshop.crud.users import get_user_by_email, get_user
from workshop.core.security import verify_password, create_access_token
from workshop.core.logging import logger
from workshop.services.policy import Principal
from workshop.services.provisioning import update_own_profile

router = APIRouter()

def user_out(user) -> UserOut:
    p = user.profile
    return UserOut(id=user.id, email=user.email, full_name=p.full_name, username=p.username, role=p.role)

@router.post("/login", response_model=TokenOut)
def login(data: LoginIn, db: Session = Depends(get_db)):
    user = get_user_by_email(db, data.email)
    if not user or not user.is_active or user.profile is None:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if not verify_password(data.password, user.password_hash):
        logger.info("login_failed", user_id=user.id)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    token = create_access_token(user_id=user.id, role=user.profile.role)
    return TokenOut(access_token=token)

@router.get("/me", response_model=UserOut)
def me(principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    return user_out(get_user(db, principal.id))

@router.put("/me", response_model=UserOut)
def put_me(data: ProfileUpdateIn, principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    update_own_profile(db, principal, data)
    return user_out(get_user(db, principal.id))
