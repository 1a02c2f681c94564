"""Error types shared by the boot sequence, the assessment engine and the routers."""


class BootFatal(RuntimeError):
	"""The application must not start serving traffic."""


class InferenceError(RuntimeError):
	"""The inference server could not produce usable content."""


class NotFound(LookupError):
	pass


class Forbidden(PermissionError):
	pass


class AlreadyAnswered(ValueError):
	pass


class PersistenceError(RuntimeError):
	pass
