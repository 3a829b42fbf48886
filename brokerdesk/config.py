from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_JWT_SECRET = "dev-change-me"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ---- App ----
    app_env: str = "local"  # local|dev|prod
    app_version: str = "1.0.0"
    database_url: str = "sqlite:///./brokerdesk.db"
    log_level: str = "INFO"

    # ---- CORS (used by main.py) ----
    cors_allow_origins: list[str] | str = ["*"]

    # ---- Tokens ----
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_exp_minutes: int = 60 * 24  # 24h
    jwt_issuer: str = "brokerdesk-backend"

    # ---- Passwords ----
    password_hash_iterations: int = 210_000

    # ---- Uploads ----
    upload_path: str = "./uploads"
    max_file_size: int = 5 * 1024 * 1024  # 5MB

    def model_post_init(self, __context) -> None:
        env = (self.app_env or "local").strip().lower()
        is_prod = env in ("prod", "production")

        if is_prod:
            if self.jwt_secret == DEFAULT_JWT_SECRET:
                raise ValueError("SECURITY: jwt_secret must be set in prod")

            origins = self.cors_allow_origins
            if origins == "*" or origins == ["*"] or (isinstance(origins, str) and "*" in origins):
                raise ValueError("SECURITY: cors_allow_origins wildcard is not allowed in prod")


settings = Settings()
