from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from workshop.core.deps import get_db, get_current_principal
from workshop.db.models import Budget
from workshop.schemas.budgets import BudgetCreate, BudgetUpdate, BudgetOut, BudgetItemIn, BudgetItemUpdate, BudgetItemOut
from workshop.services import gateway
from workshop.services.policy import Action, Principal, redact
from workshop.services.queries import fetch, list_for
from workshop.services.public_viewer import snapshot_of
from workshop.services.exports.exporter import export_budget_pdf, default_export_path
from workshop.services.files import send_and_remove

router = APIRouter()

def _out(principal: Principal, b: Budget) -> BudgetOut:
    return redact(principal, BudgetOut.model_validate(b))

@router.get("", response_model=list[BudgetOut])
def get_budgets(
    status: str | None = Query(None),
    search: str | None = Query(None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return [_out(principal, b) for b in list_for(db, principal, Budget, status=status, search=search)]

@router.post("", response_model=BudgetOut, status_code=201)
def post_budget(data: BudgetCreate, db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    return _out(principal, gateway.create(db, principal, Budget, data))

@router.get("/{budget_id}", response_model=BudgetOut)
def get_budget(budget_id: int, db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    return _out(principal, fetch(db, principal, Budget, budget_id))

@router.put("/{budget_id}", response_model=BudgetOut)
def put_budget(
    budget_id: int,
    data: BudgetUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return _out(principal, gateway.apply(db, principal, Budget, budget_id, data))

@router.delete("/{budget_id}", status_code=204)
def delete_budget(budget_id: int, db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    gateway.delete(db, principal, Budget, budget_id)
    return Response(status_code=204)

@router.post("/{budget_id}/items", response_model=BudgetItemOut, status_code=201)
def post_item(
    budget_id: int,
    data: BudgetItemIn,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return gateway.add_item(db, principal, Budget, budget_id, data)

@router.put("/{budget_id}/items/{item_id}", response_model=BudgetItemOut)
def put_item(
    budget_id: int,
    item_id: int,
    data: BudgetItemUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return gateway.update_item(db, principal, Budget, budget_id, item_id, data)

@router.delete("/{budget_id}/items/{item_id}", status_code=204)
def delete_item(
    budget_id: int,
    item_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    gateway.remove_item(db, principal, Budget, budget_id, item_id)
    return Response(status_code=204)

@router.get("/{budget_id}/pdf")
def export_budget(budget_id: int, db: Session = Depends(get_db), principal: Principal = Depends(get_current_principal)):
    b = fetch(db, principal, Budget, budget_id, action=Action.export)
    out = default_export_path(f"budget_{b.budget_number or b.id}", "pdf")
    export_budget_pdf(snapshot_of(b), out)
    return send_and_remove(out, "application/pdf")
