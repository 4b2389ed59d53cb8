# parkdesk/config.py
"""
Application configuration using Pydantic-Settings.
All settings can be overridden via environment variables or .env file.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # ── Database ──────────────────────────────────────────────────────────
    DATABASE_URL: str = "sqlite:///./parkdesk.db"

    # ── Network ───────────────────────────────────────────────────────────
    BACKEND_IP: str = "127.0.0.1"
    BACKEND_PORT: int = 8080

    # ── Security ──────────────────────────────────────────────────────────
    API_KEY: Optional[str] = None   # Set in .env to enable auth on API endpoints

    # ── Receipt printer ───────────────────────────────────────────────────
    PRINTER_URL: Optional[str] = None   # POST endpoint of the print bridge; unset = log only
    PRINTER_TIMEOUT_SECONDS: float = 5.0
    BUSINESS_NAME: str = "256 PARKING"

    # ── Register desk ─────────────────────────────────────────────────────
    REPRINT_SENTINEL: str = "0101"     # Plate typed at the desk to reprint the last receipt
    EVENT_FREE_MINUTES: int = 180      # Minutes covered by the flat event fee

    # ── Logging ───────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
