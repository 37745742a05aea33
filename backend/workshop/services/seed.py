from sqlalchemy.orm import Session
from workshop.db.session import SessionLocal
from workshop.db.rls import bind_service
from workshop.core.config import settings
from workshop.core.logging import logger
from workshop.crud.users import get_user_by_email, create_identity, write_profile
from workshop.db.models.user import Role

def seed_demo():
    db: Session = SessionLocal()
    try:
        bind_service(db)
        if settings.DEMO_ADMIN_EMAIL and settings.DEMO_ADMIN_PASSWORD:
            u = get_user_by_email(db, settings.DEMO_ADMIN_EMAIL)
            if not u:
                u = create_identity(db, settings.DEMO_ADMIN_EMAIL, settings.DEMO_ADMIN_PASSWORD)
                write_profile(db, u.id, "Demo Admin", "admin", Role.admin.value)
                logger.info("demo_admin_seeded", user_id=u.id)
    finally:
        db.close()
