from typing import List, Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str
    database_echo: bool = False

    # Хранилище загруженных markdown-файлов
    storage_backend: Literal["disk", "memory"] = "disk"
    storage_root: str = "storage"
    max_upload_bytes: int = 5 * 1024 * 1024

    markdown_allow_raw_html: bool = False

    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}

settings = Settings()
