from __future__ import annotations
import random
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..assessment_service import GRAMMAR_TOPICS, AssessmentService
from ..db import get_db
from ..errors import AlreadyAnswered, Forbidden, InferenceError, NotFound, PersistenceError
from ..models import Question, User
from ..ollama_client import OllamaClient, get_inference_client
from .auth import get_current_user


router = APIRouter(prefix="/assessments", tags=["assessments"])


class StartRequest(BaseModel):
	topic: Optional[str] = Field(default=None, description="One of the grammar topics; random when omitted")


class QuestionOut(BaseModel):
	# correct_answer is never sent to clients
	id: int
	question: str
	options: List[str] = []


class StartResponse(BaseModel):
	session_id: str
	topic: str
	questions: List[QuestionOut]


class SubmitRequest(BaseModel):
	session_id: str = Field(min_length=1)
	question_id: int = Field(gt=0)
	answer: str = Field(min_length=1)


class AnswerOut(BaseModel):
	id: int
	session_id: str
	question_id: int
	user_id: Optional[int] = None
	answer: str
	is_correct: bool
	feedback: str
	created_at: datetime

	model_config = {"from_attributes": True}


class AssessmentOut(BaseModel):
	session_id: str
	topic: str
	user_id: Optional[int] = None
	created_at: datetime
	questions: List[QuestionOut]
	answers: List[AnswerOut]


def _question_out(question: Question) -> QuestionOut:
	return QuestionOut(id=question.id, question=question.question_text, options=list(question.options or []))


def _pick_topic(requested: Optional[str]) -> str:
	if requested is None:
		return random.choice(GRAMMAR_TOPICS)
	if requested not in GRAMMAR_TOPICS:
		raise HTTPException(status_code=400, detail=f"topic must be one of {GRAMMAR_TOPICS}")
	return requested


@router.post("/start", response_model=StartResponse)
async def start(
	req: Optional[StartRequest] = None,
	user: User = Depends(get_current_user),
	db: Session = Depends(get_db),
	client: OllamaClient = Depends(get_inference_client),
):
	topic = _pick_topic(req.topic if req else None)
	service = AssessmentService(db, client)
	try:
		assessment, questions = await service.create_assessment(topic, user_id=user.id)
	except (InferenceError, PersistenceError) as e:
		raise HTTPException(status_code=500, detail=str(e))
	return StartResponse(
		session_id=assessment.session_id,
		topic=assessment.topic,
		questions=[_question_out(q) for q in questions],
	)


@router.post("/submit", response_model=AnswerOut)
def submit(req: SubmitRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	service = AssessmentService(db)
	try:
		return service.submit_answer(req.session_id, req.question_id, req.answer)
	except NotFound as e:
		raise HTTPException(status_code=404, detail=str(e))
	except Forbidden as e:
		raise HTTPException(status_code=403, detail=str(e))
	except AlreadyAnswered as e:
		raise HTTPException(status_code=409, detail=str(e))
	except PersistenceError:
		raise HTTPException(status_code=500, detail="Failed to save answer")


@router.get("/{session_id}", response_model=AssessmentOut)
def get_assessment(session_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
	service = AssessmentService(db)
	try:
		assessment = service.get_by_session_id(session_id)
	except NotFound:
		raise HTTPException(status_code=404, detail="Assessment not found")
	return AssessmentOut(
		session_id=assessment.session_id,
		topic=assessment.topic,
		user_id=assessment.user_id,
		created_at=assessment.created_at,
		questions=[_question_out(q) for q in assessment.questions],
		answers=[AnswerOut.model_validate(a) for a in assessment.answers],
	)
