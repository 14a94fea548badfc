from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "Creator Portal API"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"

    # Database (required)
    DATABASE_URL: str
    DB_CREATE_TABLES: bool = True

    # JWT (required)
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_HOURS: int = 12

    # Admin credentials (required)
    ADMIN_EMAIL: str
    ADMIN_PASSWORD: str

    # Media storage: "local" or "cloudinary"
    STORAGE_BACKEND: str = "local"
    CLOUDINARY_CLOUD_NAME: str = ""
    CLOUDINARY_API_KEY: str = ""
    CLOUDINARY_API_SECRET: str = ""

    # Upload
    UPLOAD_DIR: str = "uploads"
    MAX_CSV_SIZE: int = 5 * 1024 * 1024  # 5MB
    MAX_IMAGE_SIZE: int = 5 * 1024 * 1024  # 5MB
    MAX_MEDIA_SIZE: int = 50 * 1024 * 1024  # 50MB

    DEFAULT_AVATAR_URL: str = "https://placehold.co/400x400?text=Creator"

    # CORS
    ALLOWED_ORIGINS: str = "*"

    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}

    @property
    def cors_origins(self) -> list[str]:
        if self.ALLOWED_ORIGINS == "*":
            return ["*"]
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]


settings = Settings()
