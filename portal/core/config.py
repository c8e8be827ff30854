# portal/core/config.py
from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv, find_dotenv

# ---------------------------
# Env loading (root .env first, then portal/.env as fallback)
# ---------------------------
load_dotenv(find_dotenv(usecwd=True))
load_dotenv(Path(__file__).resolve().parent.parent / ".env", override=False)


def _bool(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


# --- Database ---
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./portal.db")
ENABLE_CREATE_ALL = _bool("ENABLE_CREATE_ALL", "1")

# --- Auth / JWT ---
SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# --- Links ---
APP_BASE_URL = os.getenv("APP_BASE_URL", "http://localhost:3000").rstrip("/")

# --- Email ---
APP_NAME = os.getenv("APP_NAME", "SoundsGood Client Portal")
EMAIL_FROM = os.getenv("EMAIL_FROM", "Client Portal <noreply@localhost>")
SMTP_HOST = os.getenv("SMTP_HOST", "")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USERNAME = os.getenv("SMTP_USERNAME", "")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
SMTP_USE_TLS = _bool("SMTP_USE_TLS", "1")

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
