import json
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # 애플리케이션 설정
    ENVIRONMENT: str = "development"
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 5000
    LOG_LEVEL: str = "INFO"

    # 데이터베이스 설정
    DATABASE_URL: str = "postgresql+asyncpg://user:postgres@db:5432/blog_db"
    DB_SSLMODE: str = "disable"

    # JWT 인증 설정
    JWT_SECRET_KEY: str = "your-test-secret-key-change-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_DAYS: int = 7

    # 비밀번호 해시 비용 (테스트에서는 최소값 4 사용)
    BCRYPT_ROUNDS: int = 12

    # 이 시간(ms)을 넘는 요청은 WARNING으로 기록
    SLOW_REQUEST_MS: int = 1000

    CORS_ORIGINS: List[str] = ["*"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _normalise_cors(cls, value):
        if isinstance(value, list):
            return value
        if isinstance(value, str):
            raw = value.strip()
            if raw.startswith("[") and raw.endswith("]"):
                try:
                    parsed = json.loads(raw)
                    if isinstance(parsed, list):
                        return parsed
                except json.JSONDecodeError:
                    pass
            return [item.strip() for item in raw.split(",") if item.strip()]
        raise ValueError("CORS_ORIGINS must be a string or list of strings")


settings = Config()
