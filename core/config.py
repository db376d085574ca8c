import os
from dataclasses import dataclass

from dotenv import load_dotenv

BASE_DIR = os.path.dirname(os.path.dirname(__file__))

SECRET_KEYS = (
    "DATABASE_URL",
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "AI_TIMEOUT_SECONDS",
    "DOCTOR_NAME",
)

# Load .env so OPENAI_API_KEY is available even when running via Streamlit
load_dotenv()


@dataclass(frozen=True)
class Settings:
    database_url: str
    openai_api_key: str | None
    openai_model: str
    ai_timeout_seconds: float
    log_level: str
    doctor_name: str | None


def export_secrets_to_env(keys=SECRET_KEYS) -> None:
    """Copy Streamlit secrets into os.environ when present.

    No-op when no secrets file is configured (local runs, tests).
    """
    import streamlit as st

    for key in keys:
        try:
            value = st.secrets.get(key)
        except FileNotFoundError:
            return
        if value and str(value).strip():
            os.environ[key] = str(value).strip()


def get_settings() -> Settings:
    default_db = f"sqlite:///{os.path.join(BASE_DIR, 'data', 'rx_writer.db')}"
    return Settings(
        database_url=os.getenv("DATABASE_URL", default_db),
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        ai_timeout_seconds=float(os.getenv("AI_TIMEOUT_SECONDS", "30")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        doctor_name=os.getenv("DOCTOR_NAME") or None,
    )
