from typing import List, Optional
from urllib.parse import quote_plus

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    ENV: str = "local"
    LOG_LEVEL: str = "INFO"

    # Full URL wins; otherwise the postgres parts are composed below
    DATABASE_URL: Optional[str] = None
    postgres_user: Optional[str] = None
    postgres_password: str = ""
    postgres_db: Optional[str] = None
    postgres_host: str = "localhost"
    postgres_port: str = "5432"

    secret_key: str = "change-me"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    BREVO_API_KEY: str = ""
    MAIL_FROM: str = "orders@bookstore.local"
    STORE_NAME: str = "Bookstore"
    ADMIN_EMAILS: List[str] = []

    # Checkout pricing
    TAX_RATE: float = 0.08
    DELIVERY_FEE: float = 12.00

    @property
    def database_url(self):
        if self.DATABASE_URL:
            return self.DATABASE_URL

        if not self.postgres_user or not self.postgres_db:
            return "sqlite:///./bookstore.db"

        encoded_password = quote_plus(self.postgres_password)
        return (
            f"postgresql+psycopg2://{self.postgres_user}:"
            f"{encoded_password}@{self.postgres_host}:"
            f"{self.postgres_port}/{self.postgres_db}"
        )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "allow"

settings = Settings()
