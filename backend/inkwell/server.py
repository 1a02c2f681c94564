"""Boot sequence: supervised Ollama, readiness gate, warm-up, then the API."""
from __future__ import annotations
import logging
import sys
from typing import Any

import uvicorn

from .db import init_db
from .errors import BootFatal
from .inference_server import InferenceSupervisor, preload_model, wait_until_ready
from .main import app
from .logging_config import setup_logging
from .settings import settings
from .shutdown import ShutdownCoordinator

logger = logging.getLogger(__name__)


class SupervisedServer(uvicorn.Server):
	"""uvicorn server that stops Ollama as soon as a termination signal lands.

	uvicorn owns SIGINT/SIGTERM while serving; the coordinator runs before the
	graceful drain of in-flight requests starts.
	"""

	def __init__(self, config: uvicorn.Config, coordinator: ShutdownCoordinator) -> None:
		super().__init__(config)
		self.coordinator = coordinator

	def handle_exit(self, sig: int, frame: Any) -> None:
		self.coordinator.shutdown()
		super().handle_exit(sig, frame)


def boot(supervisor: InferenceSupervisor) -> None:
	"""Start the inference server and block until it can take traffic.

	Raises BootFatal; the caller owns cleanup of a partially started supervisor.
	"""
	supervisor.start()
	wait_until_ready()
	preload_model(settings.ollama_model)


def main() -> None:
	setup_logging(settings.log_level)
	init_db()

	supervisor = InferenceSupervisor(settings.ollama_command)
	try:
		boot(supervisor)
	except BootFatal as e:
		logger.critical("%s", e)
		supervisor.stop()
		sys.exit(1)

	coordinator = ShutdownCoordinator(supervisor)
	coordinator.register()

	config = uvicorn.Config(app, host=settings.host, port=settings.port, log_config=None)
	SupervisedServer(config, coordinator).run()
	coordinator.shutdown()


if __name__ == "__main__":
	main()
