from dotenv import load_dotenv
from pydantic import BaseModel
from typing import List
import os

# Carga el .env automáticamente
load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "development")
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./expenses.db")
    sql_echo: bool = _env_flag("SQL_ECHO")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_json: bool = _env_flag("LOG_JSON")
    cors_origins: List[str] = _env_list("CORS_ORIGINS", "*")
    api_prefix: str = os.getenv("API_PREFIX", "/api")

    @property
    def json_logs(self) -> bool:
        # production always logs JSON
        return self.log_json or self.environment == "production"


# Instancia global de settings
settings = Settings()
