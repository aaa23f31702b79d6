" generic fixtures "
import logging
from copy import deepcopy
from unittest.mock import AsyncMock, Mock

import pytest

from focusdim.models import CommandResult, Node

from .testtools import TREE


def pytest_configure():
    "Runs once before all"
    from focusdim.logging_setup import init_logger

    init_logger("/dev/null", force_debug=True)


@pytest.fixture
def test_logger():
    "A silent logger"
    logger = logging.getLogger("focusdim_tests")
    logger.handlers.clear()
    logger.addHandler(logging.NullHandler())
    logger.propagate = False
    return logger


@pytest.fixture
def tree_json():
    "The raw sample tree, safe to modify"
    return deepcopy(TREE)


@pytest.fixture
def proxy(test_logger, tree_json):
    "A BackendProxy look-alike serving the sample tree"
    backend = Mock(name="backend_proxy")
    backend.log = test_logger
    backend.get_tree = AsyncMock(side_effect=lambda: Node.from_json(tree_json))
    backend.run_command = AsyncMock(return_value=[CommandResult(success=True)])
    return backend


@pytest.fixture
def backend(tree_json):
    "A WindowManagerBackend look-alike serving the sample tree"
    wm = Mock(name="backend")
    wm.get_tree = AsyncMock(side_effect=lambda **_: Node.from_json(tree_json))
    wm.run_command = AsyncMock(return_value=[CommandResult(success=True)])
    events_writer = Mock()
    events_writer.wait_closed = AsyncMock()
    wm.open_events = AsyncMock(return_value=(Mock(name="events_reader"), events_writer))
    wm.read_event = AsyncMock(return_value=None)
    return wm
