"""
Construction du client HTTP distant et de la liste des élèves.
Une seule liste par instance d'application (= une session de vue).
"""

import httpx
from fastapi import Request

from annuaire.config import settings
from annuaire.services.student_list import StudentListController
from annuaire.services.students_api import StudentsApiClient


def create_http_client() -> httpx.AsyncClient:
    """Client HTTP partagé. REMOTE_TIMEOUT_SECONDS=None désactive le timeout."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.REMOTE_TIMEOUT_SECONDS),
        headers={"Content-Type": "application/json"},
    )


def create_controller(client: httpx.AsyncClient) -> StudentListController:
    return StudentListController(StudentsApiClient(client, settings.STUDENTS_API_URL))


def get_controller(request: Request) -> StudentListController:
    """Dépendance FastAPI : fournit la liste créée au démarrage de l'application."""
    return request.app.state.controller
