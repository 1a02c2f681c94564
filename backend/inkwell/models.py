from __future__ import annotations
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer, Text, Boolean, JSON, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from .db import Base


class User(Base):
	__tablename__ = "users"
	id = Column(Integer, primary_key=True, index=True)
	username = Column(String(128), unique=True, index=True, nullable=False)
	email = Column(String(256), unique=True, index=True, nullable=False)
	password_hash = Column(String(256), nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Assessment(Base):
	__tablename__ = "assessments"
	id = Column(Integer, primary_key=True, index=True)
	# Opaque token handed to the client
	session_id = Column(String(64), unique=True, index=True, nullable=False)
	user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
	topic = Column(String(128), nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

	questions = relationship("Question", back_populates="assessment", order_by="Question.position", cascade="all, delete-orphan")
	answers = relationship("Answer", back_populates="assessment", order_by="Answer.id", cascade="all, delete-orphan")


class Question(Base):
	__tablename__ = "questions"
	id = Column(Integer, primary_key=True, index=True)
	assessment_id = Column(Integer, ForeignKey("assessments.id"), nullable=False, index=True)
	position = Column(Integer, default=0, nullable=False)
	question_text = Column(Text, nullable=False)
	options = Column(JSON, default=list, nullable=False)
	# Never returned to clients
	correct_answer = Column(Text, nullable=False)

	assessment = relationship("Assessment", back_populates="questions")


class Answer(Base):
	__tablename__ = "answers"
	__table_args__ = (UniqueConstraint("session_id", "question_id", name="uq_answers_session_question"),)
	id = Column(Integer, primary_key=True, index=True)
	assessment_id = Column(Integer, ForeignKey("assessments.id"), nullable=False, index=True)
	session_id = Column(String(64), nullable=False, index=True)
	question_id = Column(Integer, ForeignKey("questions.id"), nullable=False)
	user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
	answer = Column(Text, nullable=False)
	is_correct = Column(Boolean, nullable=False)
	feedback = Column(String(16), nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

	assessment = relationship("Assessment", back_populates="answers")


class Story(Base):
	__tablename__ = "stories"
	id = Column(Integer, primary_key=True, index=True)
	title = Column(String(256), nullable=False)
	content = Column(Text, nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
