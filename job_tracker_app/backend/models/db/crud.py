from sqlalchemy.orm import Session

from . import user as model
from ... import schemas


def get_user_by_email(db: Session, email: str):
    return db.query(model.User).filter(model.User.email == email.strip().lower()).first()


def get_user_by_id(db: Session, user_id: int):
    return db.query(model.User).filter(model.User.id == user_id).first()


def create_user(db: Session, user: schemas.UserCreate, hashed_password: str):
    db_user = model.User(
        email=user.email.strip().lower(),
        full_name=user.full_name,
        hashed_password=hashed_password,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user
