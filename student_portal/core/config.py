from typing import List

from pydantic import model_validator
from pydantic_settings import BaseSettings

DEV_JWT_SECRET_KEY = "dev-only-secret-change-me-3f9a1c7e5b2d48a6"


class Settings(BaseSettings):
    PROJECT_NAME: str = "Student Portal"
    ENVIRONMENT: str = "development"
    DATABASE_URL: str = "mysql+pymysql://root@localhost:3306/student_portal"
    JWT_SECRET_KEY: str = DEV_JWT_SECRET_KEY
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    BCRYPT_ROUNDS: int = 12
    AUTH_COOKIE_NAME: str = "auth-token"
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    LOG_LEVEL: str = "INFO"
    LOGIN_PATH: str = "/login"
    DEFAULT_LANDING_PATH: str = "/dashboard"

    class Config:
        env_file = ".env"

    @model_validator(mode="after")
    def check_production_secret(self):
        if self.is_production and self.JWT_SECRET_KEY == DEV_JWT_SECRET_KEY:
            raise ValueError("JWT_SECRET_KEY must be set in production")
        if self.ENVIRONMENT != "test" and self.BCRYPT_ROUNDS < 10:
            raise ValueError("BCRYPT_ROUNDS must be at least 10")
        return self

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def cookie_secure(self) -> bool:
        return self.is_production

    @property
    def token_lifetime_seconds(self) -> int:
        return self.ACCESS_TOKEN_EXPIRE_MINUTES * 60


settings = Settings()
