from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    app_name: str = "MenuAdmin"
    environment: str = "local"
    log_level: str = "INFO"
    admin_rate_limit: str = "60/minute"
    sentry_dsn: str | None = None
    sentry_environment: str | None = None

    store_backend: Literal["memory", "realtime_db"] = "memory"
    menu_collection: str = "menu"
    store_timeout: float = 10.0

    # Firebase Realtime Database
    firebase_project_id: str = "utak-test-17e1b"
    firebase_database_url: str | None = None
    firebase_credentials_path: str | None = None

    @property
    def database_url(self) -> str:
        if self.firebase_database_url:
            return self.firebase_database_url.rstrip("/")
        return f"https://{self.firebase_project_id}-default-rtdb.firebaseio.com"


settings = Settings()
