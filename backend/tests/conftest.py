"""
Configuration partagée pour tous les tests.
L'API distante est remplacée par des AsyncMock : aucun appel réseau réel.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from annuaire.config import settings
from annuaire.dependencies import get_controller
from annuaire.main import app
from annuaire.services.student_list import StudentListController
from annuaire.services.students_api import StudentsApiClient


def make_api(students=None) -> MagicMock:
    """Mock du client distant : tous les appels réussissent par défaut."""
    api = MagicMock(spec=StudentsApiClient)
    api.fetch_students = AsyncMock(return_value=list(students or []))
    api.create_student = AsyncMock(return_value=None)
    api.update_student = AsyncMock(return_value=None)
    api.delete_student = AsyncMock(return_value=None)
    return api


@pytest.fixture
def api():
    return make_api()


@pytest.fixture
def controller(api):
    """Liste vide branchée sur l'API mockée."""
    return StudentListController(api)


@pytest.fixture
def client(controller, monkeypatch):
    """Client HTTP de test : pas de chargement au démarrage, liste mockée."""
    monkeypatch.setattr(settings, "LOAD_ON_STARTUP", False)
    app.dependency_overrides[get_controller] = lambda: controller
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
