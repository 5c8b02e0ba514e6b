import io

import pytest
from fakes import LifecycleSink
from structlog.testing import CapturingLogger

from logmux import LoggingSystem


@pytest.fixture
def lifecycle_journal():
    LifecycleSink.journal = []
    LifecycleSink.failing = set()
    yield LifecycleSink.journal
    LifecycleSink.journal = []
    LifecycleSink.failing = set()


@pytest.fixture
def diagnostics() -> CapturingLogger:
    return CapturingLogger()


@pytest.fixture
def stdout() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def system(stdout, diagnostics) -> LoggingSystem:
    system = LoggingSystem(stdout=stdout, diagnostics=diagnostics)
    yield system
    system.close()
