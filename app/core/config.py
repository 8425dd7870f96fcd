from typing import List
from pydantic_settings import BaseSettings

EDITOR_KEY_PLACEHOLDERS = ("no-api-key", "your-tinymce-api-key-here")


class Settings(BaseSettings):
    PROJECT_NAME: str = "Quill Blog API"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Appwrite
    APPWRITE_URL: str = "https://fra.cloud.appwrite.io/v1"
    APPWRITE_PROJECT_ID: str = ""
    APPWRITE_DATABASE_ID: str = ""
    APPWRITE_COLLECTION_ID: str = ""
    APPWRITE_BUCKET_ID: str = ""
    # Server API key; sessions can only be created server-side with one
    APPWRITE_API_KEY: str = ""

    # Rich-text editor
    TINYMCE_API_KEY: str = ""

    # Contact form delivery (optional)
    MAIL_USERNAME: str = ""
    MAIL_PASSWORD: str = ""
    MAIL_FROM: str = ""
    MAIL_PORT: int = 465
    MAIL_SERVER: str = ""
    MAIL_SSL: bool = True
    CONTACT_INBOX: str = ""

    SESSION_COOKIE_NAME: str = "quill_session"
    CORS_ORIGINS: List[str] = ["http://localhost:5173"]
    POSTS_PAGE_SIZE: int = 25

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def editor_configured(self) -> bool:
        key = self.TINYMCE_API_KEY.strip()
        return bool(key) and key not in EDITOR_KEY_PLACEHOLDERS and len(key) > 10

    def missing_settings(self) -> List[str]:
        required = {
            "APPWRITE_URL": self.APPWRITE_URL,
            "APPWRITE_PROJECT_ID": self.APPWRITE_PROJECT_ID,
            "APPWRITE_DATABASE_ID": self.APPWRITE_DATABASE_ID,
            "APPWRITE_COLLECTION_ID": self.APPWRITE_COLLECTION_ID,
            "APPWRITE_BUCKET_ID": self.APPWRITE_BUCKET_ID,
            "APPWRITE_API_KEY": self.APPWRITE_API_KEY,
        }
        return [name for name, value in required.items() if not value]

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
