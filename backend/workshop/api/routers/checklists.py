from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from workshop.core.deps import get_db, get_current_principal
from workshop.db.models import Checklist
from workshop.schemas.checklists import (
    ChecklistCreate,
    ChecklistUpdate,
    ChecklistOut,
    ChecklistItemIn,
    ChecklistItemUpdate,
    ChecklistItemOut,
    ItemCheckIn,
)
from workshop.services import gateway
from workshop.services.policy import Action, Principal, redact
from workshop.services.queries import fetch, list_for
from workshop.services.public_viewer import snapshot_of
from workshop.services.exports.exporter import export_checklist_pdf, default_export_path
from workshop.services.files import send_and_remove

router = APIRouter()

def _out(principal: Principal, c: Checklist) -> ChecklistOut:
    return redact(principal, ChecklistOut.model_validate(c))

@router.get("", response_model=list[ChecklistOut])
def get_checklists(
    status: str | None = Query(None),
    search: str | None = Query(None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return [_out(principal, c) for c in list_for(db, principal, Checklist, status=status, search=search)]

@router.post("", response_model=ChecklistOut, status_code=201)
def post_checklist(data: ChecklistCreate, db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    return _out(principal, gateway.create(db, principal, Checklist, data))

@router.get("/{checklist_id}", response_model=ChecklistOut)
def get_checklist(checklist_id: int, db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    return _out(principal, fetch(db, principal, Checklist, checklist_id))

@router.put("/{checklist_id}", response_model=ChecklistOut)
def put_checklist(
    checklist_id: int,
    data: ChecklistUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return _out(principal, gateway.apply(db, principal, Checklist, checklist_id, data))

@router.delete("/{checklist_id}", status_code=204)
def delete_checklist(checklist_id: int, db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    gateway.delete(db, principal, Checklist, checklist_id)
    return Response(status_code=204)

@router.post("/{checklist_id}/items", response_model=ChecklistItemOut, status_code=201)
def post_item(
    checklist_id: int,
    data: ChecklistItemIn,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return gateway.add_item(db, principal, Checklist, checklist_id, data)

@router.put("/{checklist_id}/items/{item_id}", response_model=ChecklistItemOut)
def put_item(
    checklist_id: int,
    item_id: int,
    data: ChecklistItemUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return gateway.update_item(db, principal, Checklist, checklist_id, item_id, data)

@router.delete("/{checklist_id}/items/{item_id}", status_code=204)
def delete_item(
    checklist_id: int,
    item_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    gateway.remove_item(db, principal, Checklist, checklist_id, item_id)
    return Response(status_code=204)

@router.put("/{checklist_id}/items/{item_id}/check", response_model=ChecklistItemOut)
def put_item_check(
    checklist_id: int,
    item_id: int,
    data: ItemCheckIn,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return gateway.set_item_checked(db, principal, checklist_id, item_id, data.checked, data.observation)

@router.get("/{checklist_id}/pdf")
def export_checklist(checklist_id: int, db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    c = fetch(db, principal, Checklist, checklist_id, action=Action.export)
    out = default_export_path(f"checklist_{c.id}", "pdf")
    export_checklist_pdf(snapshot_of(c), out)
    return send_and_remove(out, "application/pdf")
