"""
Shared pytest fixtures.
The reference instant is a Tuesday morning so weekday arithmetic is easy to follow.
"""
from __future__ import annotations

from datetime import datetime

import pytest

from triage.infra.repository import TaskRepository
from triage.services.task_service import TaskService

REFERENCE = datetime(2026, 10, 20, 10, 0)


@pytest.fixture
def now() -> datetime:
    return REFERENCE


@pytest.fixture
def repo() -> TaskRepository:
    return TaskRepository()


@pytest.fixture
def service(repo: TaskRepository) -> TaskService:
    return TaskService(repo)


@pytest.fixture
def qt_app():
    """A core application instance so QTimer can be started without a display."""
    from PySide6.QtCore import QCoreApplication

    app = QCoreApplication.instance() or QCoreApplication([])
    yield app
