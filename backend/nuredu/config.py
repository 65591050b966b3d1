"""Application settings and validation."""

import os
from pathlib import Path

BASE = Path(__file__).resolve().parent


class Settings:
    ENV: str
    JWT_SECRET: str
    JWT_ALGORITHM: str
    JWT_EXPIRE_HOURS: int
    DATABASE_URL: str
    CURRICULUM_DATA_PATH: Path
    ALLOW_INSECURE_JWT: bool
    ALLOW_DEV_CORS: bool
    API_BASE_URL: str
    API_TIMEOUT_SECONDS: float

    def __init__(self):
        self.ENV = os.getenv("ENV", "dev").lower()
        self.JWT_SECRET = os.getenv("JWT_SECRET", "change_me_for_prod")
        self.JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
        self.JWT_EXPIRE_HOURS = int(os.getenv("JWT_EXPIRE_HOURS", "24"))
        self.DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE.parent / 'app.db'}")
        self.CURRICULUM_DATA_PATH = Path(os.getenv("CURRICULUM_DATA_PATH", str(BASE / "data" / "curriculum.json")))
        self.ALLOW_INSECURE_JWT = os.getenv("ALLOW_INSECURE_JWT", "false").lower() == "true"
        self.ALLOW_DEV_CORS = os.getenv("ALLOW_DEV_CORS", "true").lower() == "true"
        self.API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")
        self.API_TIMEOUT_SECONDS = float(os.getenv("API_TIMEOUT_SECONDS", "10"))
        self._validate()

    def _validate(self):
        if self.ENV != "dev" and not self.ALLOW_INSECURE_JWT and self.JWT_SECRET == "change_me_for_prod":
            raise RuntimeError("JWT_SECRET must be set to a non-default value in non-dev environments")


settings = Settings()
