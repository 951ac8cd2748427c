"""
Gestion de la liste des élèves (une instance par session de vue).

Stratégie : mise à jour optimiste + synchro best-effort
- Chaque écriture est appliquée localement AVANT l'appel distant
- Un échec distant n'annule jamais la modification locale (warning + RemoteOutcome)
- Seul le chargement échoue "dur" : LoadError, la collection précédente est conservée
- Chaque chargement reçoit un numéro croissant : un résultat arrivé après
  un chargement plus récent est ignoré (le dernier lancé gagne)
- La suppression se fait en deux temps : demande (jeton) puis confirmation

Tout tourne dans une seule boucle asyncio : les mutations de la collection
se font entre deux `await`, sans verrou.
"""

import logging
import time
import uuid
from typing import Any, Awaitable, Callable, Mapping, Optional, Type, TypeVar, Union

import pydantic
from pydantic import BaseModel

from annuaire.config import settings
from annuaire.exceptions import LoadError, NotFoundError, RemoteError, UpdateError, ValidationError, WriteError
from annuaire.schemas.student import (
    OperationResult,
    PendingDeletion,
    RemoteOutcome,
    Student,
    StudentForm,
    StudentListState,
    StudentUpdate,
)
from annuaire.services.students_api import StudentsApiClient

logger = logging.getLogger(__name__)

FormT = TypeVar("FormT", bound=BaseModel)
FormData = Union[BaseModel, Mapping[str, Any]]


def generate_student_id(students, first_id: Optional[int] = None) -> int:
    """
    ID local d'un nouvel élève : max des IDs existants + 1,
    ou `first_id` (1000 par défaut) si la liste est vide.
    """
    if not students:
        return settings.NEW_STUDENT_FIRST_ID if first_id is None else first_id
    return max(s.id for s in students) + 1


def validate_form(model: Type[FormT], data: FormData) -> FormT:
    """
    Valide une saisie de formulaire avec le schéma donné.
    Lève ValidationError avec un message par champ en erreur.
    """
    if isinstance(data, model):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)

    try:
        return model.model_validate(data)
    except pydantic.ValidationError as exc:
        errors = {}
        for err in exc.errors():
            field = ".".join(str(part) for part in err["loc"]) or "form"
            message = err["msg"]
            if message.startswith("Value error, "):
                message = message[len("Value error, "):]
            errors.setdefault(field, message)
        raise ValidationError(errors) from exc


class StudentListController:
    """Collection en mémoire + état de la vue, synchronisés au mieux avec l'API distante."""

    def __init__(
        self,
        api: StudentsApiClient,
        clock: Callable[[], float] = time.monotonic,
        success_ttl: Optional[float] = None,
    ):
        self.api = api
        self.state = StudentListState()
        self._clock = clock
        self._success_ttl = settings.SUCCESS_MESSAGE_TTL_SECONDS if success_ttl is None else success_ttl
        self._success_at: Optional[float] = None
        self._load_seq = 0

    # ============================================================
    # Lecture de l'état
    # ============================================================

    @property
    def students(self):
        return self.state.students

    def find(self, student_id: int) -> Optional[Student]:
        return next((s for s in self.state.students if s.id == student_id), None)

    def generate_id(self) -> int:
        return generate_student_id(self.state.students)

    def current_success_message(self) -> Optional[str]:
        """Message de succès, effacé 3 secondes (par défaut) après son émission."""
        if self._success_at is not None and self._clock() - self._success_at >= self._success_ttl:
            self.state.success_message = None
            self._success_at = None
        return self.state.success_message

    def snapshot(self) -> StudentListState:
        """Copie de l'état courant, message de succès expiré retiré."""
        self.current_success_message()
        return self.state.model_copy(deep=True)

    # ============================================================
    # Chargement
    # ============================================================

    async def load(self) -> OperationResult:
        """
        Recharge toute la collection depuis l'API.

        En cas d'échec : LoadError, collection inchangée, `error` renseigné.
        Un résultat devenu obsolète (chargement plus récent lancé entretemps)
        est ignoré, qu'il soit un succès ou un échec.
        """
        self._load_seq += 1
        token = self._load_seq
        self.state.is_loading = True
        self.state.error = None

        try:
            students = await self.api.fetch_students()
        except RemoteError as exc:
            if token != self._load_seq:
                logger.info("Échec du chargement #%d obsolète, ignoré", token)
                return self._result(RemoteOutcome(
                    operation="load", ok=False, stale=True, error=exc.message, error_code=exc.error_code,
                ))
            self.state.error = exc.message
            logger.error("Chargement des élèves impossible : %s", exc.message)
            raise LoadError(exc.message) from exc
        finally:
            if token == self._load_seq:
                self.state.is_loading = False

        if token != self._load_seq:
            logger.info("Chargement #%d obsolète (dernier : #%d), résultat ignoré", token, self._load_seq)
            return self._result(RemoteOutcome(operation="load", ok=True, stale=True))

        self.state.students = students
        self.state.loaded = True
        logger.info("%d élèves chargés", len(students))
        return self._result(RemoteOutcome(operation="load", ok=True))

    # ============================================================
    # Écritures (optimistes)
    # ============================================================

    async def create(self, data: FormData) -> OperationResult:
        """
        Ajoute un élève à la fin de la liste puis tente POST /users.
        L'élève reste dans la liste même si l'appel distant échoue.
        """
        self._begin_submit()
        try:
            form = validate_form(StudentForm, data)
            student = Student(
                id=self.generate_id(),
                name=form.name,
                course=form.course,
                year=form.year or 1,
                email=form.email or "",
                phone=form.phone or "",
                address=form.address,
            )
            self.state.students.append(student)
            logger.info("Élève %d ajouté localement (%s)", student.id, student.name)

            remote = await self._sync("create", self.api.create_student(student))

            self._close_form()
            self._set_success(f"Élève « {student.name} » ajouté avec succès.")
        finally:
            self.state.is_submitting = False
        return self._result(remote, student)

    async def update(self, student_id: int, data: FormData) -> OperationResult:
        """
        Fusionne les champs fournis dans l'élève ciblé puis tente PUT /users/{id}.
        Lève UpdateError (collection inchangée, aucun appel distant) si l'ID est inconnu.
        """
        self._begin_submit()
        try:
            changes = validate_form(StudentUpdate, data).model_dump(exclude_unset=True)

            index = next((i for i, s in enumerate(self.state.students) if s.id == student_id), None)
            if index is None:
                logger.warning("Mise à jour ignorée : élève %d absent de la liste", student_id)
                raise UpdateError(f"Élève {student_id} introuvable.")

            student = Student.model_validate({**self.state.students[index].model_dump(), **changes})
            self.state.students[index] = student
            logger.info("Élève %d modifié localement (%s)", student_id, ", ".join(changes) or "aucun champ")

            remote = await self._sync("update", self.api.update_student(student_id, student))

            self._close_form()
            self._set_success(f"Élève « {student.name} » modifié avec succès.")
        finally:
            self.state.is_submitting = False
        return self._result(remote, student)

    def request_delete(self, student_id: int) -> PendingDeletion:
        """Première phase : crée une demande de suppression à confirmer (remplace la précédente)."""
        student = self.find(student_id)
        if student is None:
            raise NotFoundError(f"Élève {student_id} introuvable.")

        pending = PendingDeletion(
            token=uuid.uuid4().hex,
            student_id=student.id,
            student_name=student.name,
            prompt=f"Voulez-vous vraiment supprimer {student.name} ? Cette action est irréversible.",
        )
        self.state.pending_deletion = pending
        return pending

    def cancel_delete(self, token: str) -> bool:
        """Abandonne la demande. Aucun effet si le jeton ne correspond pas."""
        pending = self.state.pending_deletion
        if pending is None or pending.token != token:
            return False
        self.state.pending_deletion = None
        return True

    async def confirm_delete(self, token: str) -> OperationResult:
        """
        Seconde phase : retire l'élève de la liste puis tente DELETE /users/{id}.
        La suppression locale n'est jamais annulée.
        """
        pending = self.state.pending_deletion
        if pending is None or pending.token != token:
            raise NotFoundError("Demande de suppression introuvable ou expirée.")
        self.state.pending_deletion = None

        student_id = pending.student_id
        self.state.deleting_id = student_id
        self.state.error = None
        self.state.warning = None
        try:
            removed = self.find(student_id)
            self.state.students = [s for s in self.state.students if s.id != student_id]
            if self.state.editing_id == student_id:
                self._close_form()
            logger.info("Élève %d retiré localement", student_id)

            remote = await self._sync("delete", self.api.delete_student(student_id))

            self._set_success(f"Élève « {pending.student_name} » supprimé avec succès.")
        finally:
            if self.state.deleting_id == student_id:
                self.state.deleting_id = None
        return self._result(remote, removed)

    async def delete(
        self,
        student_id: int,
        confirm: Callable[[PendingDeletion], bool],
    ) -> Optional[OperationResult]:
        """Suppression en un appel : `confirm` décide (oui/non). Refus → None, aucun effet."""
        pending = self.request_delete(student_id)
        if not confirm(pending):
            self.cancel_delete(pending.token)
            logger.debug("Suppression de l'élève %d annulée", student_id)
            return None
        return await self.confirm_delete(pending.token)

    # ============================================================
    # Formulaire
    # ============================================================

    def start_add(self) -> StudentListState:
        self.state.editing_id = None
        self.state.form_open = True
        self._clear_messages()
        return self.snapshot()

    def start_edit(self, student_id: int) -> Student:
        """Ouvre le formulaire en mode édition sur l'élève donné."""
        student = self.find(student_id)
        if student is None:
            raise NotFoundError(f"Élève {student_id} introuvable.")
        self.state.editing_id = student_id
        self.state.form_open = True
        self._clear_messages()
        return student

    def close_form(self) -> StudentListState:
        self._close_form()
        self.state.error = None
        return self.snapshot()

    async def submit(self, data: FormData) -> OperationResult:
        """Envoi du formulaire : modification si une édition est en cours, sinon ajout."""
        if self.state.editing_id is not None:
            return await self.update(self.state.editing_id, data)
        return await self.create(data)

    def dismiss_error(self) -> StudentListState:
        self.state.error = None
        self.state.warning = None
        return self.snapshot()

    # ============================================================
    # Interne
    # ============================================================

    async def _sync(self, operation: str, call: Awaitable[Any]) -> RemoteOutcome:
        """Attend l'appel distant ; un échec devient un WriteError journalisé, jamais levé."""
        try:
            await call
        except RemoteError as exc:
            error = WriteError(exc.message, operation=operation)
            logger.warning("Appel distant en échec (%s), modification locale conservée : %s", operation, error.message)
            self.state.warning = error.message
            return RemoteOutcome(operation=operation, ok=False, error=error.message, error_code=error.error_code)
        return RemoteOutcome(operation=operation, ok=True)

    def _begin_submit(self) -> None:
        self.state.is_submitting = True
        self.state.error = None
        self.state.warning = None

    def _close_form(self) -> None:
        self.state.form_open = False
        self.state.editing_id = None

    def _clear_messages(self) -> None:
        self.state.error = None
        self.state.success_message = None
        self._success_at = None

    def _set_success(self, message: str) -> None:
        self.state.success_message = message
        self._success_at = self._clock()

    def _result(self, remote: RemoteOutcome, student: Optional[Student] = None) -> OperationResult:
        return OperationResult(state=self.snapshot(), remote=remote, student=student)
