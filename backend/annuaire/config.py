"""
Configuration centrale de l'application via variables d'environnement.
Charger depuis un fichier .env en développement.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # API distante (JSONPlaceholder : les écritures ne sont pas persistées)
    STUDENTS_API_URL: str = "https://jsonplaceholder.typicode.com/users"
    REMOTE_TIMEOUT_SECONDS: Optional[float] = None  # None = pas de timeout

    # Liste des élèves
    NEW_STUDENT_FIRST_ID: int = 1000  # au-dessus des IDs renvoyés par l'API
    DEFAULT_COURSE: str = "Undeclared"
    SUCCESS_MESSAGE_TTL_SECONDS: float = 3.0
    LOAD_ON_STARTUP: bool = True

    # Logs
    LOG_LEVEL: str = "INFO"

    # Environnement
    ENV: str = "development"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = Settings()
