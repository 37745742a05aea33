from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from workshop.core.deps import get_db, get_current_principal
from workshop.schemas.public import PublicLinkOut
from workshop.services.links import get_or_create_link, deactivate_link, public_url
from workshop.services.policy import Principal

router = APIRouter()

@router.post("/{resource_type}/{resource_id}", response_model=PublicLinkOut)
def post_link(
    resource_type: str,
    resource_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    link = get_or_create_link(db, principal, resource_type, resource_id)
    return PublicLinkOut(
        resource_type=link.resource_type,
        resource_id=link.resource_id,
        token=link.token,
        url=public_url(link.resource_type, link.token),
        is_active=link.is_active,
    )

@router.delete("/{resource_type}/{resource_id}")
def delete_link(
    resource_type: str,
    resource_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return {"deactivated": deactivate_link(db, principal, resource_type, resource_id)}
