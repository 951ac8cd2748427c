"""
Router pour la liste des élèves.
Expose à la couche de présentation : chargement, ajout, modification,
suppression en deux temps (demande + confirmation) et gestion du formulaire.
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException

from annuaire.dependencies import get_controller
from annuaire.exceptions import LoadError, NotFoundError, UpdateError, ValidationError
from annuaire.schemas.student import OperationResult, PendingDeletion, Student, StudentListState
from annuaire.services.student_list import StudentListController

router = APIRouter(prefix="/api/v1/students", tags=["Élèves"])


def _validation_failed(e: ValidationError) -> HTTPException:
    return HTTPException(status_code=422, detail={"message": e.message, "errors": e.errors})


@router.get("", response_model=StudentListState, summary="État courant de la liste")
def get_state(controller: StudentListController = Depends(get_controller)):
    """Retourne la liste des élèves et les indicateurs de la vue (chargement, envoi, messages)."""
    return controller.snapshot()


@router.post("/load", response_model=OperationResult, summary="Recharger les élèves")
async def load_students(controller: StudentListController = Depends(get_controller)):
    """
    Recharge toute la liste depuis l'API distante.
    En cas d'échec → 503, la liste précédente est conservée (l'UI propose de réessayer).
    """
    try:
        return await controller.load()
    except LoadError as e:
        raise HTTPException(status_code=503, detail=e.message)


@router.post("", response_model=OperationResult, status_code=201, summary="Ajouter un élève")
async def create_student(
    data: Dict[str, Any] = Body(...),
    controller: StudentListController = Depends(get_controller),
):
    """
    Ajoute un élève en fin de liste (ID local) puis tente l'envoi distant.
    Un échec distant est signalé dans `remote` sans annuler l'ajout.
    """
    try:
        return await controller.create(data)
    except ValidationError as e:
        raise _validation_failed(e)


@router.post("/submit", response_model=OperationResult, summary="Envoyer le formulaire")
async def submit_form(
    data: Dict[str, Any] = Body(...),
    controller: StudentListController = Depends(get_controller),
):
    """Modification si une édition est en cours, ajout sinon."""
    try:
        return await controller.submit(data)
    except ValidationError as e:
        raise _validation_failed(e)
    except UpdateError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.put("/{student_id}", response_model=OperationResult, summary="Modifier un élève")
async def update_student(
    student_id: int,
    data: Dict[str, Any] = Body(...),
    controller: StudentListController = Depends(get_controller),
):
    """Met à jour les champs fournis. Les champs absents ne sont pas modifiés."""
    try:
        return await controller.update(student_id, data)
    except ValidationError as e:
        raise _validation_failed(e)
    except UpdateError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.post("/{student_id}/delete-request", response_model=PendingDeletion, summary="Demander une suppression")
def request_delete(student_id: int, controller: StudentListController = Depends(get_controller)):
    """Retourne un jeton à confirmer ; rien n'est supprimé à ce stade."""
    try:
        return controller.request_delete(student_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.post("/deletions/{token}", response_model=OperationResult, summary="Confirmer une suppression")
async def confirm_delete(token: str, controller: StudentListController = Depends(get_controller)):
    """Retire l'élève de la liste puis tente la suppression distante."""
    try:
        return await controller.confirm_delete(token)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.delete("/deletions/{token}", status_code=204, summary="Annuler une suppression")
def cancel_delete(token: str, controller: StudentListController = Depends(get_controller)):
    """Abandonne la demande de suppression. Sans effet si le jeton est inconnu."""
    controller.cancel_delete(token)


@router.post("/{student_id}/edit", response_model=Student, summary="Éditer un élève")
def start_edit(student_id: int, controller: StudentListController = Depends(get_controller)):
    """Ouvre le formulaire en mode édition sur cet élève."""
    try:
        return controller.start_edit(student_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.post("/form/new", response_model=StudentListState, summary="Ouvrir le formulaire d'ajout")
def start_add(controller: StudentListController = Depends(get_controller)):
    return controller.start_add()


@router.post("/form/close", response_model=StudentListState, summary="Fermer le formulaire")
def close_form(controller: StudentListController = Depends(get_controller)):
    return controller.close_form()


@router.delete("/messages", response_model=StudentListState, summary="Masquer les messages d'erreur")
def dismiss_error(controller: StudentListController = Depends(get_controller)):
    return controller.dismiss_error()
