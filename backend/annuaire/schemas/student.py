"""
Schémas Pydantic pour les élèves.

Deux formes coexistent :
- la forme "domaine" (Student) manipulée par la liste et renvoyée à l'UI ;
- la forme "externe" (ExternalUser / UserPayload) de l'API JSONPlaceholder.
"""

import re
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

NAME_MIN_LENGTH = 2
COURSE_MIN_LENGTH = 2
# Lettres (accents compris), espaces, tirets, apostrophes
NAME_REGEX = re.compile(r"^[A-Za-zÀ-ÖØ-öø-ÿ\s\-']+$")


def check_name(value: str) -> str:
    trimmed = value.strip()
    if not trimmed:
        raise ValueError("Le nom est obligatoire.")
    if len(trimmed) < NAME_MIN_LENGTH:
        raise ValueError(f"Le nom doit contenir au moins {NAME_MIN_LENGTH} caractères.")
    if not NAME_REGEX.match(trimmed):
        raise ValueError("Le nom ne peut contenir que des lettres, espaces, tirets et apostrophes.")
    return trimmed


def check_course(value: str) -> str:
    trimmed = value.strip()
    if not trimmed:
        raise ValueError("La filière est obligatoire.")
    if len(trimmed) < COURSE_MIN_LENGTH:
        raise ValueError(f"La filière doit contenir au moins {COURSE_MIN_LENGTH} caractères.")
    return trimmed


# ============================================================
# Forme domaine
# ============================================================

class Student(BaseModel):
    """Élève tel qu'affiché dans la liste."""
    id: int
    name: str
    course: str = "Undeclared"
    year: int = 1                  # 1 à 4
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None  # "{rue}, {ville}"


class StudentForm(BaseModel):
    """Saisie du formulaire d'ajout (nom et filière obligatoires)."""
    name: str = Field(default="", validate_default=True)
    course: str = Field(default="", validate_default=True)
    year: Optional[int] = Field(default=None, ge=1, le=4)
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None

    @field_validator("name")
    @classmethod
    def valid_name(cls, v: str) -> str:
        return check_name(v)

    @field_validator("course")
    @classmethod
    def valid_course(cls, v: str) -> str:
        return check_course(v)


class StudentUpdate(BaseModel):
    """Saisie du formulaire de modification. Les champs absents ne sont pas modifiés."""
    name: Optional[str] = None
    course: Optional[str] = None
    year: Optional[int] = Field(default=None, ge=1, le=4)
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None

    # Un champ absent n'est pas validé ; null explicite est refusé comme une valeur vide
    @field_validator("name")
    @classmethod
    def valid_name(cls, v: Optional[str]) -> str:
        return check_name(v or "")

    @field_validator("course")
    @classmethod
    def valid_course(cls, v: Optional[str]) -> str:
        return check_course(v or "")

    @field_validator("year")
    @classmethod
    def valid_year(cls, v: Optional[int]) -> int:
        if v is None:
            raise ValueError("L'année est obligatoire.")
        return v


# ============================================================
# Forme externe (API distante)
# ============================================================

class ExternalCompany(BaseModel):
    name: Optional[str] = None


class ExternalAddress(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None


class ExternalUser(BaseModel):
    """Utilisateur renvoyé par GET /users. Les champs inconnus sont ignorés."""
    id: int
    name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[ExternalCompany] = None
    address: Optional[ExternalAddress] = None

    model_config = ConfigDict(extra="ignore")


class UserPayload(BaseModel):
    """Corps envoyé en POST /users et PUT /users/{id}."""
    id: Optional[int] = None  # uniquement pour PUT
    name: str
    company: ExternalCompany
    email: str = ""


# ============================================================
# État de la vue
# ============================================================

class PendingDeletion(BaseModel):
    """Demande de suppression en attente de confirmation."""
    token: str
    student_id: int
    student_name: str
    prompt: str


class StudentListState(BaseModel):
    """Instantané de l'état de la liste, consommé par la couche de présentation."""
    students: List[Student] = []
    is_loading: bool = False
    loaded: bool = False           # False tant qu'aucune donnée n'est disponible
    error: Optional[str] = None
    warning: Optional[str] = None  # échec d'écriture distante, état local conservé
    success_message: Optional[str] = None
    is_submitting: bool = False
    deleting_id: Optional[int] = None
    editing_id: Optional[int] = None
    form_open: bool = False
    pending_deletion: Optional[PendingDeletion] = None


class RemoteOutcome(BaseModel):
    """Issue de l'appel distant associé à une opération (synchro best-effort)."""
    operation: str                 # load, create, update, delete
    ok: bool
    stale: bool = False            # chargement dépassé par un chargement plus récent
    error: Optional[str] = None
    error_code: Optional[str] = None


class OperationResult(BaseModel):
    """État local après l'opération + issue distante. Un échec distant n'annule rien."""
    state: StudentListState
    remote: RemoteOutcome
    student: Optional[Student] = None
