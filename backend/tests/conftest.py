import os
# Point the app at a throwaway SQLite file before any inkwell import
os.environ["DATABASE_URL"] = "sqlite:///./test_inkwell.db"
os.environ["JWT_SECRET_KEY"] = "test-secret"

import io
import uuid
from typing import List

import pytest
from fastapi.testclient import TestClient

from inkwell.db import Base, SessionLocal, engine
from inkwell.main import app
from inkwell.ollama_client import GeneratedQuestion, get_inference_client
from inkwell import models  # noqa: F401


class FakeQuestionGenerator:
	"""Stands in for OllamaClient; question N's correct answer is "answer N"."""

	def __init__(self) -> None:
		self.calls: List[tuple] = []

	async def generate_questions(self, topic: str, count: int = 5) -> List[GeneratedQuestion]:
		self.calls.append((topic, count))
		return [
			GeneratedQuestion(
				question=f"{topic} question {i}",
				options=[f"answer {i}", "wrong a", "wrong b", "wrong c"],
				correct_answer=f"answer {i}",
			)
			for i in range(1, count + 1)
		]

	async def aclose(self) -> None:
		pass


class FakeProcess:
	def __init__(self, stdout="", stderr="", signal_error=None):
		self.pid = 4242
		self.stdout = io.StringIO(stdout)
		self.stderr = io.StringIO(stderr)
		self.returncode = None
		self.signals = []
		self._signal_error = signal_error

	def poll(self):
		return self.returncode

	def send_signal(self, sig):
		if self._signal_error is not None:
			raise self._signal_error
		self.signals.append(sig)


class FakePopen:
	def __init__(self, process=None, error=None):
		self.process = process or FakeProcess()
		self.error = error
		self.calls = []

	def __call__(self, args, **kwargs):
		self.calls.append((args, kwargs))
		if self.error is not None:
			raise self.error
		return self.process


@pytest.fixture(scope="function")
def db():
	Base.metadata.create_all(bind=engine)
	session = SessionLocal()
	yield session
	session.close()
	Base.metadata.drop_all(bind=engine)


@pytest.fixture
def generator():
	return FakeQuestionGenerator()


@pytest.fixture(scope="function")
def client(db, generator):
	app.dependency_overrides[get_inference_client] = lambda: generator
	with TestClient(app) as c:
		yield c
	app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def register_user(client, username=None, password="TestPass123!"):
	username = username or f"user-{uuid.uuid4().hex[:8]}"
	return client.post(
		"/auth/register",
		json={"username": username, "email": f"{username}@test.com", "password": password},
	)


def login_user(client, username, password="TestPass123!"):
	return client.post("/auth/login", data={"username": username, "password": password})


def auth_headers(client, username=None, password="TestPass123!"):
	"""Register and log in a user; returns the Authorization header dict."""
	username = username or f"user-{uuid.uuid4().hex[:8]}"
	reg = register_user(client, username=username, password=password)
	assert reg.status_code == 201, f"Registration failed: {reg.text}"
	resp = login_user(client, username, password)
	assert resp.status_code == 200, f"Login failed: {resp.text}"
	return {"Authorization": f"Bearer {resp.json()['access_token']}"}
