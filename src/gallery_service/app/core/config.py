from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


def get_project_root() -> Path:
    current_path = Path(__file__).parent
    while current_path != current_path.parent:
        if (current_path / "pyproject.toml").exists():
            return current_path
        current_path = current_path.parent
    return Path(".")


class Settings(BaseSettings):
    # Application Settings
    APP_NAME: str = Field(default="Gallery Service")
    DEBUG: bool = Field(default=False)
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8000)

    # CORS Settings
    ALLOWED_ORIGINS: list[str] = Field(
        default=["http://localhost:5173", "http://localhost:3000"]
    )

    # DB Settings
    DATABASE_URL: str = Field(default="sqlite:///./storage/databases/gallery.db")

    # Storage Settings
    UPLOADS_DIR: str = Field(default="./storage/uploads")
    TEMP_DIR: str = Field(default="./storage/uploads/tmp")

    # Upload Settings
    MAX_FILE_SIZE: int = Field(default=5 * 1024 * 1024)  # 5MB
    ALLOWED_MIME_TYPES: list[str] = Field(
        default=["image/jpeg", "image/png", "image/gif", "image/webp"]
    )
    ALLOWED_IMAGE_FORMATS: list[str] = Field(
        default=["jpeg", "png", "gif", "webp"]
    )
    DESCRIPTION_MAX_LENGTH: int = Field(default=500)

    # Pagination Settings
    DEFAULT_PAGE_SIZE: int = Field(default=20)
    MAX_PAGE_SIZE: int = Field(default=100)

    # Auth Settings
    JWT_SECRET_KEY: str = Field(default="change-me-in-production")
    JWT_ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=7 * 24 * 60)  # 7 days

    # Caption Generation Settings
    GEMINI_API_KEY: str | None = Field(default=None)
    GEMINI_MODEL: str = Field(default="gemini-2.5-flash")
    GEMINI_API_URL: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta"
    )
    CAPTION_TIMEOUT: float = Field(default=30.0)  # seconds
    AUTO_CAPTION_ON_UPLOAD: bool = Field(default=False)

    # Logging Settings
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FILE: str = Field(default="./storage/logs/gallery.log")

    model_config = {
        "env_file": get_project_root() / ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }

    @property
    def absolute_database_url(self) -> str:
        """Get absolute database URL based on project root."""
        if self.DATABASE_URL.startswith("sqlite:///./"):
            relative_path = self.DATABASE_URL.replace("sqlite:///./", "")
            absolute_path = get_project_root() / relative_path
            return f"sqlite:///{absolute_path}"
        return self.DATABASE_URL

    @property
    def absolute_uploads_dir(self) -> str:
        """Get absolute path for stored uploads directory."""
        return str(get_project_root() / self.UPLOADS_DIR)

    @property
    def absolute_temp_dir(self) -> str:
        """Get absolute path for temp directory."""
        return str(get_project_root() / self.TEMP_DIR)

    @property
    def absolute_log_file(self) -> str:
        return str(get_project_root() / self.LOG_FILE)

    @property
    def jwt_config(self) -> dict:
        return {
            "secret_key": self.JWT_SECRET_KEY,
            "algorithm": self.JWT_ALGORITHM,
            "access_token_expire_minutes": self.ACCESS_TOKEN_EXPIRE_MINUTES,
        }


@lru_cache()
def get_settings() -> Settings:
    return Settings()
