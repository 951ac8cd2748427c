"""
Exceptions métier de l'annuaire.

Aucune n'est fatale : chaque chemin d'erreur laisse la vue dans un état
où l'utilisateur peut réessayer.
"""

from typing import Dict, Optional


class AnnuaireError(Exception):
    """Base commune : message lisible + code d'erreur stable."""

    def __init__(self, message: str, error_code: str = "ANNUAIRE_ERROR"):
        super().__init__(message)
        self.message = message
        self.error_code = error_code


class RemoteError(AnnuaireError):
    """Appel HTTP vers l'API distante en échec (réseau ou statut non-2xx)."""

    def __init__(self, message: str, status_code: Optional[int] = None, error_code: str = "REMOTE_ERROR"):
        super().__init__(message, error_code)
        self.status_code = status_code


class LoadError(AnnuaireError):
    """Chargement de la liste impossible. La collection précédente est conservée."""

    def __init__(self, message: str, error_code: str = "LOAD_FAILED"):
        super().__init__(message, error_code)


class WriteError(AnnuaireError):
    """Écriture distante (create/update/delete) en échec. L'état local est conservé."""

    def __init__(self, message: str, operation: str, error_code: str = "WRITE_FAILED"):
        super().__init__(message, error_code)
        self.operation = operation


class ValidationError(AnnuaireError):
    """Saisie du formulaire invalide. Aucun appel distant n'est tenté."""

    def __init__(self, errors: Dict[str, str], error_code: str = "VALIDATION_ERROR"):
        message = " ".join(errors.values()) or "Saisie invalide."
        super().__init__(message, error_code)
        self.errors = errors


class UpdateError(AnnuaireError):
    """Mise à jour d'un élève absent de la collection."""

    def __init__(self, message: str = "Élève introuvable.", error_code: str = "UPDATE_TARGET_MISSING"):
        super().__init__(message, error_code)


class NotFoundError(AnnuaireError):
    """Élève ou demande de suppression introuvable."""

    def __init__(self, message: str = "Ressource introuvable.", error_code: str = "NOT_FOUND"):
        super().__init__(message, error_code)
