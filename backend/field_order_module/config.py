import os
from dataclasses import dataclass, field


def _split_origins(raw: str) -> tuple[str, ...]:
    return tuple(origin.strip() for origin in raw.split(",") if origin.strip())


@dataclass(frozen=True)
class Settings:
    database_url: str = os.getenv("FIELD_ORDER_DATABASE_URL", "")
    jwt_secret: str = os.getenv("FIELD_ORDER_JWT_SECRET", os.getenv("JWT_SECRET", "change-me-in-production"))
    jwt_algorithm: str = os.getenv("FIELD_ORDER_JWT_ALGORITHM", "HS256")
    jwt_exp_minutes: int = int(os.getenv("FIELD_ORDER_JWT_EXP_MINUTES", "60"))
    backend_host: str = os.getenv("BACKEND_HOST", "127.0.0.1")
    backend_port: int = int(os.getenv("BACKEND_PORT", "8000"))
    backend_reload: bool = os.getenv("BACKEND_RELOAD", "false").lower() == "true"
    cors_origins: tuple[str, ...] = field(
        default_factory=lambda: _split_origins(
            os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000,http://localhost:8000")
        )
    )


settings = Settings()
