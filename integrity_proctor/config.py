"""
Integrity Proctor Configuration Settings

Detection thresholds default to 5s of sustained gaze-away and 10s of
face absence before an event is logged.
"""
from pydantic_settings import BaseSettings
from typing import Literal


class Settings(BaseSettings):
    """Configuration for the proctoring service."""

    # API Settings
    APP_NAME: str = "Integrity Proctor Service"
    DEBUG: bool = True
    HOST: str = "0.0.0.0"
    PORT: int = 8002

    # Detection Settings (hysteresis thresholds, seconds)
    FOCUS_THRESHOLD_SECONDS: float = 5.0
    FACE_ABSENCE_THRESHOLD_SECONDS: float = 10.0
    # Category for objects that are neither phones nor books/paper
    OBJECT_FALLBACK_EVENT: Literal["device_detected", "other"] = "device_detected"

    # Perception cadence, used only when replaying recorded samples
    SAMPLE_INTERVAL_SECONDS: float = 0.5

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = False
    LOG_DIR: str = "logs"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
