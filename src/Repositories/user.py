# src/Repositories/user.py

from sqlalchemy.orm import Session
from typing import Optional
from src.Models.user import User


def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def create_user(db: Session, username: str, prefix: str, role: str = "user") -> User:
    user = User(username=username, prefix=prefix, role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
