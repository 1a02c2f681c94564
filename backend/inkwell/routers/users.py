from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import User
from .auth import UserOut, get_current_user

router = APIRouter(tags=["users"])


@router.get("/user", response_model=List[UserOut])
def list_users(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	return db.query(User).order_by(User.id).all()
