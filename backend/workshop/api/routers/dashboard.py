from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from workshop.core.deps import get_db, get_current_principal
from workshop.services.policy import Principal
from workshop.services.queries import dashboard

router = APIRouter()

@router.get("")
def get_dashboard(db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    return {"role": principal.role, "counts": dashboard(db, principal)}
