from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)

    # App
    APP_NAME: str = "Bento"
    DEBUG: bool = True

    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:5173"]

    # Supabase (preference store)
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""
    SUPABASE_SERVICE_KEY: str = ""

    # OCR
    TESSERACT_CMD: str = "/usr/bin/tesseract"
    OCR_LANG: str = "tha+eng"  # Thai + English slips

    # Category preferences
    PREFERENCE_BACKEND: str = "memory"  # "memory" or "supabase"
    PREFERENCE_TABLE: str = "category_preferences"

    # Keyword table override (JSON file), built-in catalog when unset
    CATEGORY_CATALOG_PATH: Optional[str] = None

    # Upload limits
    MAX_UPLOAD_MB: int = 10
    MAX_BATCH_SIZE: int = 20


settings = Settings()
