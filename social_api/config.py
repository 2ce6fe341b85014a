"""Social API: settings loaded once at startup and passed to the app factory."""

import os
from dataclasses import dataclass
from typing import List, Optional

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    secret_key: str
    database_url: str = "sqlite:///social.db"
    host: str = "0.0.0.0"
    port: int = 5000
    token_expiry_seconds: int = 0  # 0 = tokens never expire
    bcrypt_rounds: int = 10
    cors_origins: str = "*"
    log_level: str = "INFO"

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Settings":
        load_dotenv(env_file or os.path.join(os.getcwd(), ".env"))

        secret_key = os.getenv("SECRET_KEY") or os.getenv("JWT_SECRET_KEY")
        if not secret_key:
            raise RuntimeError("SECRET_KEY environment variable is not set. Add it to your .env file.")

        return cls(
            secret_key=secret_key,
            database_url=os.getenv("DATABASE_URL", "sqlite:///social.db"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "5000")),
            token_expiry_seconds=int(os.getenv("TOKEN_EXPIRY_SECONDS", "0")),
            bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", "10")),
            cors_origins=os.getenv("CORS_ORIGINS", "*"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
