from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from workshop.core.deps import get_db
from workshop.schemas.public import PublicChecklistOut, PublicBudgetOut
from workshop.services.public_viewer import resolve

router = APIRouter()

# no principal dependency: the token is the only credential
@router.get("/{resource_type}/{token}", response_model=PublicChecklistOut | PublicBudgetOut)
def get_public(resource_type: str, token: str, db: Session = Depends(get_db)):
    return resolve(db, resource_type, token)
