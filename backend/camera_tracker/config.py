import json
from typing import Any

from pydantic import computed_field
from pydantic_settings import BaseSettings


class ConfigurationError(RuntimeError):
    """Raised when the service cannot start with the given environment."""


class Settings(BaseSettings):
    database_uri: str = ""  # full SQLAlchemy URL, overrides the postgres_* parts
    postgres_user: str = "camera_tracker"
    postgres_password: str = "camera_tracker_secret"
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "camera_tracker_db"
    firebase_service_account: str = ""
    storage_bucket: str = "memoryretrieve.appspot.com"
    video_prefix: str = "videos"
    host: str = "0.0.0.0"
    port: int = 3000
    request_timeout: float = 10.0  # seconds, for DB statements and storage calls
    timezone: str = "UTC"
    log_level: str = "INFO"

    @computed_field
    @property
    def database_url(self) -> str:
        if self.database_uri:
            return self.database_uri
        return (
            f"postgresql+psycopg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    class Config:
        env_file = ("../.env", ".env")


def load_service_account(raw: str | None) -> dict[str, Any]:
    """Parse the service-account credential taken from the environment.

    Hosting dashboards often store the JSON wrapped in quotes with the inner
    quotes escaped, so one pair of outer quotes is stripped and ``\\"`` is
    unescaped before parsing.
    """
    if not raw or not raw.strip():
        raise ConfigurationError("FIREBASE_SERVICE_ACCOUNT environment variable is missing")

    text = raw.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
        text = text[1:-1].replace('\\"', '"')

    try:
        account = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"FIREBASE_SERVICE_ACCOUNT is not valid JSON: {e}") from e
    if not isinstance(account, dict):
        raise ConfigurationError("FIREBASE_SERVICE_ACCOUNT must be a JSON object")

    # Double-escaped newlines survive json.loads as a literal backslash-n
    key = account.get("private_key")
    if isinstance(key, str) and "\\n" in key:
        account["private_key"] = key.replace("\\n", "\n")
    return account


settings = Settings()
