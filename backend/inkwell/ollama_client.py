from __future__ import annotations
import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from .errors import InferenceError
from .settings import settings


@dataclass(frozen=True)
class GeneratedQuestion:
	question: str
	correct_answer: str
	options: List[str] = field(default_factory=list)


class OllamaClient:
	"""Request/response wrapper around the local Ollama generation endpoint."""

	def __init__(
		self,
		generate_url: Optional[str] = None,
		*,
		model: Optional[str] = None,
		timeout: Optional[float] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.generate_url = generate_url or settings.ollama_generate_url
		self.model = model or settings.ollama_model
		self._client = httpx.AsyncClient(timeout=timeout or settings.ollama_timeout_seconds, transport=transport)

	async def generate(self, prompt: str, *, json_format: bool = False) -> str:
		payload: Dict[str, Any] = {"model": self.model, "prompt": prompt, "stream": False}
		if json_format:
			payload["format"] = "json"
		try:
			r = await self._client.post(self.generate_url, json=payload)
			r.raise_for_status()
		except httpx.HTTPStatusError as http_err:
			raise InferenceError(f"Ollama returned status {http_err.response.status_code}") from http_err
		except httpx.RequestError as net_err:
			raise InferenceError(f"Ollama request failed: {net_err}") from net_err
		try:
			return r.json()["response"]
		except (ValueError, KeyError, TypeError) as err:
			raise InferenceError(f"Unexpected Ollama response: {r.text}") from err

	async def generate_questions(self, topic: str, count: int = 5) -> List[GeneratedQuestion]:
		raw = await self.generate(_question_prompt(topic, count), json_format=True)
		data = _extract_json(raw)
		items = data.get("questions") if isinstance(data, dict) else data
		if not isinstance(items, list):
			raise InferenceError("LLM did not return a list of questions.")

		questions: List[GeneratedQuestion] = []
		for item in items:
			if len(questions) >= count:
				break
			if not isinstance(item, dict):
				continue
			text = item.get("question")
			correct = item.get("correct_answer")
			options = item.get("options") or []
			if not isinstance(text, str) or not text.strip():
				continue
			if not isinstance(correct, str) or not correct.strip():
				continue
			if not isinstance(options, list):
				options = []
			questions.append(
				GeneratedQuestion(
					question=text.strip(),
					correct_answer=correct.strip(),
					options=[str(o).strip() for o in options],
				)
			)
		if not questions:
			raise InferenceError(f"LLM returned no usable questions for topic '{topic}'.")
		return questions

	async def aclose(self) -> None:
		await self._client.aclose()


def _question_prompt(topic: str, count: int) -> str:
	return (
		"You are an English grammar assessment writer.\n"
		f"Write {count} multiple-choice questions testing the grammar topic: {topic}.\n"
		"Each question must have exactly 4 options and exactly one correct option.\n"
		"The correct_answer value must be copied verbatim from the options.\n"
		'Return ONLY JSON of the form {"questions": [{"question": str, "options": [str, str, str, str], "correct_answer": str}]}.\n'
		"No markdown, no extra commentary."
	)


def _extract_json(text: str) -> Any:
	try:
		return json.loads(text)
	except Exception:
		pass
	code_block = re.search(r"```(?:json)?\s*([\s\S]*?)\s*```", text)
	if code_block:
		try:
			return json.loads(code_block.group(1))
		except Exception:
			pass
	first = text.find("{")
	last = text.rfind("}")
	if first != -1 and last > first:
		try:
			return json.loads(text[first : last + 1])
		except Exception:
			pass
	raise InferenceError("LLM did not return valid JSON.")


async def get_inference_client():
	client = OllamaClient()
	try:
		yield client
	finally:
		await client.aclose()
