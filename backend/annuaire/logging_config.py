"""
Configuration des logs applicatifs (stdout, format texte).
"""

import logging

from annuaire.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "") -> logging.Logger:
    """
    Configure le logger racine. Le niveau vient de LOG_LEVEL si aucun niveau
    explicite n'est fourni. Les handlers déjà installés (uvicorn, pytest) sont conservés.
    """
    level_name = (level or settings.LOG_LEVEL).upper()

    logging.basicConfig(format=LOG_FORMAT)
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level_name, logging.INFO))

    # httpx logge chaque requête en INFO : trop bavard pour l'annuaire
    logging.getLogger("httpx").setLevel(logging.WARNING)

    return root_logger
