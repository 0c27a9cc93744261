"""
Foundation settings for the NormForm packages.
"""

from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class NormFormSettings(BaseSettings):
    """
    Core settings shared by the view, the form lifecycle and the web host.
    Values are read from the environment and from an optional `.env` file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
    )

    # --- Basic Environment ---
    DEBUG: bool = True
    SECRET_KEY: str = ""
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # --- Template Engine ---
    # Relative paths are resolved against the working directory of the process.
    TEMPLATE_DIRECTORY: str = "templates"
    TEMPLATE_CACHE_DIRECTORY: str = "templates_c"
    TEMPLATE_AUTO_RELOAD: bool = True
    TEMPLATE_STRICT_UNDEFINED: bool = False

    # Reserved names of the globals injected into every template
    SERVER_GLOBAL_NAME: str = "_server"
    SESSION_GLOBAL_NAME: str = "_session"

    # --- Form Lifecycle ---
    SUBMISSION_METHOD: str = "POST"
    REDIRECT_STATUS_CODE: int = 302

    # --- Request Tracing ---
    ENABLE_REQUEST_ID: bool = True
    REQUEST_ID_HEADER: str = "X-Request-ID"

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str | None = None

    @model_validator(mode="after")
    def validate_security(self) -> "NormFormSettings":
        """Ensures production doesn't ship without a secret key."""
        if not self.DEBUG and not self.SECRET_KEY:
            raise ValueError("SECRET_KEY is mandatory in production mode.")
        return self

    def is_development(self) -> bool:
        return self.DEBUG or self.ENVIRONMENT == "development"


# Singleton instance for core use
normform_settings = NormFormSettings()
