from sqlalchemy import select, func
from sqlalchemy.orm import Session

def get_resource(db: Session, model, resource_id: int):
    # populate_existing: derived fields are always computed from fresh state
    stmt = select(model).where(model.id == resource_id).execution_options(populate_existing=True)
    return db.execute(stmt).scalar_one_or_none()

def get_item(db: Session, item_model, parent_column: str, parent_id: int, item_id: int):
    return (
        db.query(item_model)
        .filter(item_model.id == item_id, getattr(item_model, parent_column) == parent_id)
        .one_or_none()
    )

def list_resources(db: Session, query, model, status: str | None = None, search: str | None = None):
    if status:
        query = query.filter(model.status == status)
    if search:
        like = f"%{search.strip().lower()}%"
        query = query.filter(func.lower(model.customer_name).like(like) | func.lower(model.vehicle_name).like(like))
    return query.order_by(model.created_at.desc(), model.id.desc()).all()

def count_by_status(query, model) -> dict[str, int]:
    rows = query.with_entities(model.status, func.count(model.id)).group_by(model.status).all()
    counts = {s: 0 for s in model.STATUSES}
    counts.update({status: n for status, n in rows})
    return counts
