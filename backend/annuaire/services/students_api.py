"""
Client HTTP de l'API distante des élèves (JSONPlaceholder /users).

L'API ne persiste pas les écritures : POST/PUT/DELETE renvoient un écho simulé.
Toute erreur (réseau, statut non-2xx, réponse illisible) est levée en RemoteError.
"""

import logging
from typing import List, Optional

import httpx
import pydantic

from annuaire.config import settings
from annuaire.exceptions import RemoteError
from annuaire.schemas.student import Student
from annuaire.services.student_mapper import student_to_payload, user_to_student

logger = logging.getLogger(__name__)


class StudentsApiClient:
    """Appels GET/POST/PUT/DELETE vers /users, mappés vers la forme domaine."""

    def __init__(self, client: httpx.AsyncClient, base_url: Optional[str] = None):
        self.client = client
        self.base_url = (base_url or settings.STUDENTS_API_URL).rstrip("/")

    async def _send(self, action: str, method: str, url: str, json: Optional[dict] = None) -> httpx.Response:
        """Envoie la requête et lève RemoteError si elle échoue ou si le statut n'est pas 2xx."""
        try:
            response = await self.client.request(method, url, json=json)
        except httpx.HTTPError as exc:
            logger.error("Erreur réseau (%s %s) : %s", method, url, exc)
            raise RemoteError(f"Impossible de {action} : {exc}") from exc

        if not response.is_success:
            logger.error("Réponse %s sur %s %s", response.status_code, method, url)
            raise RemoteError(
                f"Impossible de {action} : {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )
        return response

    async def fetch_students(self) -> List[Student]:
        """GET /users → liste d'élèves."""
        response = await self._send("charger les élèves", "GET", self.base_url)
        try:
            users = response.json()
            return [user_to_student(user) for user in users]
        except (ValueError, TypeError, pydantic.ValidationError) as exc:
            logger.error("Réponse GET /users illisible : %s", exc)
            raise RemoteError(f"Impossible de charger les élèves : réponse invalide ({exc})") from exc

    async def create_student(self, student: Student) -> Optional[Student]:
        """POST /users. Renvoie l'écho de l'API converti en élève (None si illisible)."""
        response = await self._send(
            "créer l'élève", "POST", self.base_url, json=student_to_payload(student),
        )
        return self._echo(response)

    async def update_student(self, student_id: int, student: Student) -> Optional[Student]:
        """PUT /users/{id}. Renvoie l'écho de l'API converti en élève (None si illisible)."""
        response = await self._send(
            "modifier l'élève", "PUT", f"{self.base_url}/{student_id}",
            json=student_to_payload(student, student_id=student_id),
        )
        return self._echo(response)

    async def delete_student(self, student_id: int) -> None:
        """DELETE /users/{id}. Le corps de la réponse est ignoré."""
        await self._send("supprimer l'élève", "DELETE", f"{self.base_url}/{student_id}")

    @staticmethod
    def _echo(response: httpx.Response) -> Optional[Student]:
        # L'écho n'est qu'informatif : un corps illisible ne fait pas échouer l'écriture
        try:
            return user_to_student(response.json())
        except (ValueError, TypeError, pydantic.ValidationError):
            logger.debug("Écho de l'API illisible, ignoré : %r", response.text[:200])
            return None
