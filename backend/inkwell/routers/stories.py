from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..db import get_db
from ..models import Story, User
from .auth import get_current_user

router = APIRouter(tags=["stories"])


class StoryOut(BaseModel):
	id: int
	title: str
	content: str
	created_at: datetime

	model_config = {"from_attributes": True}


@router.get("/stories", response_model=List[StoryOut])
def list_stories(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	return db.query(Story).order_by(Story.id).all()
