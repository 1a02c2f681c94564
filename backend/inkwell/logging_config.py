import logging
import sys


def setup_logging(level: str = "INFO") -> logging.Logger:
	"""Configure console logging for the API process and the supervised inference server."""
	log_level = logging.getLevelName(level.upper())
	if not isinstance(log_level, int):
		log_level = logging.INFO

	root_logger = logging.getLogger()
	root_logger.setLevel(log_level)
	root_logger.handlers.clear()

	handler = logging.StreamHandler(sys.stdout)
	handler.setLevel(log_level)
	handler.setFormatter(
		logging.Formatter(
			fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
			datefmt="%Y-%m-%d %H:%M:%S",
		)
	)
	root_logger.addHandler(handler)

	# Silence noisy loggers
	logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
	logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
	logging.getLogger("httpx").setLevel(logging.WARNING)
	logging.getLogger("passlib").setLevel(logging.ERROR)

	return root_logger
