from __future__ import annotations
import logging
import signal
import sys
import threading
from typing import Any, Callable, Iterable

from .inference_server import InferenceSupervisor

logger = logging.getLogger(__name__)

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ShutdownCoordinator:
	"""Stops the supervised inference server on SIGINT/SIGTERM, then exits.

	Register only after boot has passed the readiness gate, so the supervisor
	has fully started before any stop can run. Signal delivery is treated as
	one-shot: later signals are ignored once shutdown has begun.
	"""

	def __init__(
		self,
		supervisor: InferenceSupervisor,
		*,
		exit: Callable[[int], Any] = sys.exit,
		signals: Iterable[signal.Signals] = DEFAULT_SIGNALS,
	) -> None:
		self._supervisor = supervisor
		self._exit = exit
		self._signals = tuple(signals)
		self._shutdown_event = threading.Event()

	def register(self) -> None:
		for sig in self._signals:
			signal.signal(sig, self._handle_signal)
		logger.info("Shutdown handlers registered")

	@property
	def is_shutting_down(self) -> bool:
		return self._shutdown_event.is_set()

	def _handle_signal(self, signum: int, frame: Any) -> None:
		if self._shutdown_event.is_set():
			return
		logger.info("Received %s. Shutting down gracefully...", signal.Signals(signum).name)
		self.shutdown()
		self._exit(0)

	def shutdown(self) -> None:
		"""Stop the supervised process once; safe to call when none is running."""
		if self._shutdown_event.is_set():
			return
		self._shutdown_event.set()
		self._supervisor.stop()
		logger.info("Application shut down successfully.")
