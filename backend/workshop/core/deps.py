from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.orm import Session

from workshop.db.session import SessionLocal
from workshop.db.rls import bind_principal
from workshop.core.security import decode_token
from workshop.crud.users import get_user
from workshop.db.models.user import Role
from workshop.services.policy import Principal

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_current_principal(db: Session = Depends(get_db), token: str = Depends(oauth2_scheme)) -> Principal:
    try:
        payload = decode_token(token)
        user_id = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    user = get_user(db, user_id)
    if not user or not user.is_active or user.profile is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found/disabled")
    # role comes from the store, never from the token
    principal = Principal(id=user.id, role=user.profile.role)
    bind_principal(db, principal.id, principal.role)
    return principal

def require_roles(*roles: Role):
    allowed = {r.value for r in roles}
    def _dep(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in allowed:
            raise HTTPException(status_code=403, detail="Not permitted")
        return principal
    return _dep
