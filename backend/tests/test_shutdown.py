import signal

import pytest

from inkwell.inference_server import InferenceSupervisor
from inkwell.shutdown import ShutdownCoordinator
from tests.conftest import FakePopen, FakeProcess


@pytest.fixture
def restore_signal_handlers():
	saved = {sig: signal.getsignal(sig) for sig in (signal.SIGINT, signal.SIGTERM)}
	yield
	for sig, handler in saved.items():
		signal.signal(sig, handler)


def _running_supervisor(process):
	supervisor = InferenceSupervisor("ollama serve", popen=FakePopen(process))
	supervisor.start()
	for thread in supervisor.drain_threads:
		thread.join(timeout=5)
	return supervisor


def test_termination_signal_stops_process_once_and_exits_zero(restore_signal_handlers):
	process = FakeProcess()
	exits = []
	coordinator = ShutdownCoordinator(_running_supervisor(process), exit=exits.append)
	coordinator.register()

	signal.raise_signal(signal.SIGTERM)

	assert process.signals == [signal.SIGTERM]
	assert exits == [0]
	assert coordinator.is_shutting_down is True


def test_interrupt_is_handled_like_terminate(restore_signal_handlers):
	process = FakeProcess()
	exits = []
	ShutdownCoordinator(_running_supervisor(process), exit=exits.append).register()

	signal.raise_signal(signal.SIGINT)

	assert process.signals == [signal.SIGTERM]
	assert exits == [0]


def test_repeated_signals_only_shut_down_once(restore_signal_handlers):
	process = FakeProcess()
	exits = []
	ShutdownCoordinator(_running_supervisor(process), exit=exits.append).register()

	signal.raise_signal(signal.SIGTERM)
	signal.raise_signal(signal.SIGINT)

	assert process.signals == [signal.SIGTERM]
	assert exits == [0]


def test_signal_without_running_process_exits_cleanly(restore_signal_handlers):
	exits = []
	supervisor = InferenceSupervisor("ollama serve", popen=FakePopen())
	ShutdownCoordinator(supervisor, exit=exits.append).register()

	signal.raise_signal(signal.SIGTERM)

	assert exits == [0]


def test_direct_shutdown_then_signal_does_not_stop_twice(restore_signal_handlers):
	process = FakeProcess()
	exits = []
	coordinator = ShutdownCoordinator(_running_supervisor(process), exit=exits.append)
	coordinator.register()

	coordinator.shutdown()
	signal.raise_signal(signal.SIGTERM)

	assert process.signals == [signal.SIGTERM]
	assert exits == []
