"""
Conversion entre la forme externe (utilisateur JSONPlaceholder) et la forme domaine (élève).

Lecture : company.name → filière, année dérivée de l'ID, adresse "rue, ville".
Écriture : filière → company.name, email vide par défaut.
"""

from typing import Any, Mapping, Optional, Union

from annuaire.config import settings
from annuaire.schemas.student import ExternalCompany, ExternalUser, Student, UserPayload


def derive_year(user_id: int) -> int:
    """Année 1 à 4 dérivée de l'ID (variété déterministe, sans signification)."""
    return (user_id % 4) + 1


def format_address(street: Optional[str], city: Optional[str]) -> str:
    """Concatène rue et ville ; une partie absente devient une chaîne vide."""
    return f"{street or ''}, {city or ''}"


def user_to_student(user: Union[ExternalUser, Mapping[str, Any]]) -> Student:
    """Transforme un utilisateur de l'API en élève."""
    if not isinstance(user, ExternalUser):
        user = ExternalUser.model_validate(user)

    course = user.company.name if user.company and user.company.name else settings.DEFAULT_COURSE
    address = user.address

    return Student(
        id=user.id,
        name=user.name,
        course=course,
        year=derive_year(user.id),
        email=user.email,
        phone=user.phone,
        address=format_address(
            address.street if address else None,
            address.city if address else None,
        ),
    )


def student_to_payload(student: Union[Student, Mapping[str, Any]], student_id: Optional[int] = None) -> dict:
    """
    Construit le corps de requête POST/PUT à partir d'un élève (ou d'une saisie).
    `student_id` n'est fourni que pour une mise à jour (PUT).
    """
    data = student.model_dump() if isinstance(student, Student) else dict(student)

    payload = UserPayload(
        id=student_id,
        name=data.get("name") or "",
        company=ExternalCompany(name=data.get("course")),
        email=data.get("email") or "",
    )
    body = payload.model_dump()
    if student_id is None:
        del body["id"]
    return body
