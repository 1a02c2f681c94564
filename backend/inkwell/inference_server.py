"""Lifecycle of the local Ollama server: launch, readiness, warm-up and stop.

A single InferenceSupervisor is built at boot and handed to the shutdown
coordinator. A crash of the supervised process after boot is not detected
and nothing restarts it.
"""
from __future__ import annotations
import logging
import shlex
import signal
import subprocess
import threading
import time
from typing import IO, Callable, List, Optional, Sequence, Union

import httpx

from .errors import BootFatal
from .settings import settings

logger = logging.getLogger(__name__)
ollama_logger = logging.getLogger("inkwell.ollama")

STDERR_PREFIX = "[OLLAMA WARNING]"


class InferenceSupervisor:
	def __init__(
		self,
		command: Union[str, Sequence[str], None] = None,
		*,
		popen: Callable[..., subprocess.Popen] = subprocess.Popen,
		output_logger: Optional[logging.Logger] = None,
	) -> None:
		if command is None:
			command = settings.ollama_command
		self.command: List[str] = shlex.split(command) if isinstance(command, str) else list(command)
		self._popen = popen
		self._output_logger = output_logger or ollama_logger
		self._process: Optional[subprocess.Popen] = None
		self.drain_threads: List[threading.Thread] = []

	@property
	def process(self) -> Optional[subprocess.Popen]:
		return self._process

	@property
	def is_running(self) -> bool:
		return self._process is not None and self._process.poll() is None

	def start(self) -> subprocess.Popen:
		"""Launch the inference server and stream its output into the log.

		Raises BootFatal when the executable cannot be launched or when a
		process is already held by this supervisor.
		"""
		if self._process is not None:
			raise BootFatal("Ollama is already running under this supervisor")
		try:
			process = self._popen(
				self.command,
				stdin=subprocess.DEVNULL,
				stdout=subprocess.PIPE,
				stderr=subprocess.PIPE,
				encoding="utf-8",
				errors="replace",
				bufsize=1,
			)
		except OSError as err:
			raise BootFatal(f"Failed to start Ollama: {err}") from err
		self._process = process

		# Each drain loop ends on its own when the stream reaches EOF
		self.drain_threads = [
			threading.Thread(target=self._drain, args=(process.stdout, logging.INFO, None), name="ollama-stdout", daemon=True),
			threading.Thread(target=self._drain, args=(process.stderr, logging.WARNING, STDERR_PREFIX), name="ollama-stderr", daemon=True),
		]
		for thread in self.drain_threads:
			thread.start()

		logger.info("Ollama started successfully (pid %s)", process.pid)
		return process

	def _drain(self, stream: Optional[IO[str]], level: int, prefix: Optional[str]) -> None:
		if stream is None:
			return
		with stream:
			for line in stream:
				line = line.rstrip("\r\n")
				if prefix:
					self._output_logger.log(level, "%s %s", prefix, line)
				else:
					self._output_logger.log(level, "%s", line)

	def stop(self) -> bool:
		"""Send SIGTERM to the supervised process, if any.

		Returns True when a process was held. Signalling failures are logged,
		the host is shutting down regardless.
		"""
		process = self._process
		if process is None:
			return False
		self._process = None
		logger.info("Stopping Ollama...")
		try:
			process.send_signal(signal.SIGTERM)
		except OSError as err:
			logger.error("Failed to stop Ollama: %s", err)
		return True


def is_server_running(base_url: Optional[str] = None, *, timeout: float = 2.0) -> bool:
	try:
		r = httpx.get(base_url or settings.ollama_base_url, timeout=timeout)
	except httpx.HTTPError:
		return False
	return r.is_success


def wait_until_ready(
	probe: Optional[Callable[[], bool]] = None,
	*,
	attempts: Optional[int] = None,
	interval: Optional[float] = None,
	sleep: Callable[[float], None] = time.sleep,
) -> int:
	"""Block until the health probe succeeds; return the attempt that did.

	Raises BootFatal once every attempt has failed.
	"""
	probe = probe or is_server_running
	attempts = settings.readiness_attempts if attempts is None else attempts
	interval = settings.readiness_interval_seconds if interval is None else interval
	for attempt in range(1, attempts + 1):
		if probe():
			logger.info("Ollama is now ready.")
			return attempt
		logger.info("Waiting for Ollama to start... (%d/%d)", attempt, attempts)
		if attempt < attempts:
			sleep(interval)
	raise BootFatal(f"Ollama did not start in time ({attempts} attempts).")


def preload_model(
	model_name: Optional[str] = None,
	*,
	generate_url: Optional[str] = None,
	client: Optional[httpx.Client] = None,
) -> bool:
	"""Force the model into memory with an empty generation request.

	A non-200 answer is logged and tolerated; a transport failure means the
	server is unreachable right after passing the readiness gate and raises
	BootFatal.
	"""
	model_name = model_name or settings.ollama_model
	url = generate_url or settings.ollama_generate_url
	http = client or httpx.Client(timeout=settings.ollama_timeout_seconds)
	try:
		r = http.post(url, json={"model": model_name})
	except httpx.RequestError as err:
		raise BootFatal(f"Failed to preload model {model_name}: {err}") from err
	finally:
		if client is None:
			http.close()

	if r.status_code == 200:
		logger.info("Model '%s' preloaded successfully.", model_name)
		return True
	logger.warning("Failed to preload model '%s', status: %d", model_name, r.status_code)
	return False
