from __future__ import annotations
import logging
import uuid
from typing import List, Optional, Protocol, Sequence, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from .errors import AlreadyAnswered, Forbidden, InferenceError, NotFound, PersistenceError
from .models import Answer, Assessment, Question
from .ollama_client import GeneratedQuestion
from .settings import settings

logger = logging.getLogger(__name__)

GRAMMAR_TOPICS: List[str] = [
	"Tenses",
	"Subject-Verb Agreement",
	"Active and Passive Voice",
	"Direct and Indirect Speech",
	"Punctuation Rules",
]

FEEDBACK_CORRECT = "Correct"
FEEDBACK_INCORRECT = "Incorrect"


class QuestionGenerator(Protocol):
	async def generate_questions(self, topic: str, count: int = ...) -> Sequence[GeneratedQuestion]:
		...


class AssessmentService:
	"""Creates assessment sessions and scores answers against their question set."""

	def __init__(self, db: Session, generator: Optional[QuestionGenerator] = None, *, question_count: Optional[int] = None) -> None:
		self.db = db
		self.generator = generator
		self.question_count = question_count or settings.questions_per_assessment

	async def create_assessment(self, topic: str, user_id: Optional[int] = None) -> Tuple[Assessment, List[Question]]:
		if self.generator is None:
			raise InferenceError("No question generator configured")
		generated = await self.generator.generate_questions(topic, self.question_count)
		if not generated:
			raise InferenceError(f"No questions generated for topic '{topic}'")

		assessment = Assessment(session_id=uuid.uuid4().hex, user_id=user_id, topic=topic)
		assessment.questions = [
			Question(position=i, question_text=g.question, options=list(g.options), correct_answer=g.correct_answer)
			for i, g in enumerate(generated)
		]
		# Session and questions are committed together or not at all
		try:
			self.db.add(assessment)
			self.db.commit()
		except SQLAlchemyError as err:
			self.db.rollback()
			logger.exception("Failed to persist assessment for topic %s", topic)
			raise PersistenceError("Failed to save assessment") from err
		self.db.refresh(assessment)
		logger.info("Created assessment %s on '%s' with %d questions", assessment.session_id, topic, len(assessment.questions))
		return assessment, list(assessment.questions)

	def get_by_session_id(self, session_id: str) -> Assessment:
		assessment = (
			self.db.query(Assessment)
			.options(selectinload(Assessment.questions), selectinload(Assessment.answers))
			.filter(Assessment.session_id == session_id)
			.first()
		)
		if assessment is None:
			raise NotFound("Session not found")
		return assessment

	def get_question(self, question_id: int) -> Question:
		question = self.db.get(Question, question_id)
		if question is None:
			raise NotFound("Question not found")
		return question

	def submit_answer(self, session_id: str, question_id: int, answer_text: str) -> Answer:
		assessment = self.get_by_session_id(session_id)
		question = self.get_question(question_id)

		# Guards against answering another session's questions
		if not any(q.id == question.id for q in assessment.questions):
			logger.warning("Question %s submitted against session %s it does not belong to", question_id, session_id)
			raise Forbidden("Question does not belong to this assessment")

		if any(a.question_id == question.id for a in assessment.answers):
			raise AlreadyAnswered("Question already answered in this assessment")

		# Exact, case-sensitive comparison
		is_correct = question.correct_answer == answer_text
		answer = Answer(
			assessment_id=assessment.id,
			session_id=session_id,
			question_id=question.id,
			user_id=assessment.user_id,
			answer=answer_text,
			is_correct=is_correct,
			feedback=FEEDBACK_CORRECT if is_correct else FEEDBACK_INCORRECT,
		)
		try:
			self.db.add(answer)
			self.db.commit()
		except IntegrityError as err:
			# A concurrent submission for the same question won the unique constraint
			self.db.rollback()
			raise AlreadyAnswered("Question already answered in this assessment") from err
		except SQLAlchemyError as err:
			self.db.rollback()
			logger.exception("Failed to save answer for session %s question %s", session_id, question_id)
			raise PersistenceError("Failed to save answer") from err
		self.db.refresh(answer)
		return answer
