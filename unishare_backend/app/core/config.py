from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///./unishare.db"
    jwt_secret: str = "change_me_in_production"
    jwt_expire_minutes: int = 60 * 24 * 7  # 7 days
    environment: str = "development"
    log_level: str = "INFO"

    # Externally visible base URL used to build Document.file_url
    api_url: str = "http://localhost:8000"
    upload_dir: str = "uploads"
    max_upload_bytes: int = 100 * 1024 * 1024
    allowed_mime_types: list[str] = [
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-powerpoint",
        "application/vnd.openxmlformats-officedocument.presentationml.presentation",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/zip",
        "text/plain",
        "image/png",
        "image/jpeg",
    ]
    cors_origins: list[str] = ["*"]

    # Fixed value handed out by the admin password reset.
    reset_password_value: str = "123456"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
