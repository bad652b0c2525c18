"""Shared pytest fixtures."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from helpers import FakeCompiler, FakeInterpreter, RecordingListener
from workbench.compiler.registry import CompilerRegistry
from workbench.events import ListenerBus
from workbench.model import GlobalModel
from workbench.services.settings import Settings


@pytest.fixture
def bus() -> ListenerBus:
    return ListenerBus()


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A resolved project directory, so paths compare equal to the model's."""

    root = tmp_path.resolve() / "project"
    root.mkdir()
    return root


@pytest.fixture
def compiler() -> FakeCompiler:
    return FakeCompiler()


@pytest.fixture
def interpreters() -> list[FakeInterpreter]:
    """Every interpreter created by the ``model`` fixture, oldest first."""

    return []


@pytest.fixture
def model(compiler: FakeCompiler, interpreters: list[FakeInterpreter], listener: RecordingListener) -> GlobalModel:
    def factory() -> FakeInterpreter:
        interpreter = FakeInterpreter()
        interpreters.append(interpreter)
        return interpreter

    instance = GlobalModel(
        factory,
        compilers=CompilerRegistry([compiler]),
        settings=Settings(),
    )
    instance.add_listener(listener)
    return instance


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way it was after a test reconfigures it."""

    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
