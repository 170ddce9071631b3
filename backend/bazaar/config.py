# backend/bazaar/config.py
from __future__ import annotations
import os


def _split_csv(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


class Config:
    # Optional "SECRET_KEY", with default dev key (also signs local bearer tokens)
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # Document store backend: "firestore" in deployment, "sql" for local runs and tests
    DOCUMENT_BACKEND = os.environ.get("DOCUMENT_BACKEND", "sql")

    # Only used by the "sql" document backend
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///bazaar.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Bearer token verification: "firebase" (ID tokens) or "signed" (HS256, SECRET_KEY)
    AUTH_BACKEND = os.environ.get("AUTH_BACKEND", "signed")
    TOKEN_TTL_SECONDS = int(os.environ.get("TOKEN_TTL_SECONDS", str(60 * 60 * 12)))

    # Service account JSON for firebase_admin; falls back to ADC when unset
    GOOGLE_APPLICATION_CREDENTIALS = os.environ.get("GOOGLE_APPLICATION_CREDENTIALS", "")

    # Daily maintenance sweep
    RESET_BATCH_SIZE = int(os.environ.get("RESET_BATCH_SIZE", "500"))
    RESET_SCHEDULE = os.environ.get("RESET_SCHEDULE", "0 0 * * *")
    RESET_TIMEZONE = os.environ.get("RESET_TIMEZONE", "Asia/Kuala_Lumpur")
    FUNCTIONS_REGION = os.environ.get("FUNCTIONS_REGION", "asia-southeast1")

    CORS_ALLOWED_ORIGINS = _split_csv(os.environ.get(
        "CORS_ALLOWED_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000",
    ))
