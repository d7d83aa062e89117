# salary_mgmt/config.py

import os
from dotenv import load_dotenv

load_dotenv()


def _as_bool(value: str) -> bool:
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///salary_mgmt.db")
    SQL_ECHO: bool = _as_bool(os.getenv("SQL_ECHO", "false"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    CORS_ORIGINS: list[str] = [
        o.strip()
        for o in os.getenv(
            "CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173"
        ).split(",")
        if o.strip()
    ]
    DATA_FILE: str = os.getenv("DATA_FILE", "data/employee_performance.csv")


settings = Settings()
