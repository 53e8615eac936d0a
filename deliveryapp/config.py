from decimal import Decimal
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    ENV: str = "local"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "sqlite:///./deliveryapp.db"

    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # role value in user_roles that unlocks the admin console
    ADMIN_ROLE: str = "admin"

    STORAGE_ENDPOINT_URL: str = ""
    STORAGE_ACCESS_KEY_ID: str = ""
    STORAGE_SECRET_ACCESS_KEY: str = ""
    STORAGE_BUCKET: str = "product-images"
    STORAGE_PUBLIC_BASE: str = ""

    CART_STORAGE_DIR: str = "./.carts"

    COMPANY_NAME: str = "DeliveryApp"
    DELIVERY_FEE: Decimal = Decimal("5.00")
    WHATSAPP_BASE_URL: str = "https://wa.me"

    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:8080",
        "http://127.0.0.1:5173",
    ]

    @property
    def database_url(self) -> str:
        # managed hosts still hand out the legacy scheme
        if self.DATABASE_URL.startswith("postgres://"):
            return self.DATABASE_URL.replace("postgres://", "postgresql://", 1)
        return self.DATABASE_URL

    @property
    def storage_enabled(self) -> bool:
        return bool(self.STORAGE_ENDPOINT_URL and self.STORAGE_BUCKET)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "allow"


settings = Settings()
