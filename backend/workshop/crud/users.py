from sqlalchemy.orm import Session
from workshop.db.models.user import User, Profile
from workshop.core.security import hash_password

def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email.strip().lower()).one_or_none()

def get_user(db: Session, user_id: int) -> User | None:
    return db.query(User).filter(User.id == user_id).one_or_none()

def get_profile(db: Session, user_id: int) -> Profile | None:
    return db.query(Profile).filter(Profile.id == user_id).one_or_none()

def list_users(db: Session):
    return db.query(User).order_by(User.id).all()

def create_identity(db: Session, email: str, password: str) -> User:
    u = User(email=email.strip().lower(), password_hash=hash_password(password))
    db.add(u)
    db.commit()
    db.refresh(u)
    return u

def write_profile(db: Session, user_id: int, full_name: str | None, username: str | None, role: str) -> Profile:
    p = get_profile(db, user_id)
    if p is None:
        p = Profile(id=user_id)
        db.add(p)
    p.full_name = full_name
    p.username = username
    p.role = role
    db.commit()
    db.refresh(p)
    return p

def delete_identity(db: Session, user_id: int) -> None:
    db.query(Profile).filter(Profile.id == user_id).delete()
    db.query(User).filter(User.id == user_id).delete()
    db.commit()
