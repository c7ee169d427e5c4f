from pydantic_settings import BaseSettings

class Settings(BaseSettings):

    DATABASE_URL: str = "sqlite+aiosqlite:///./storefront.db"
    DB_ECHO: bool = False
    JWT_SECRET: str = "dev-secret-change-me"
    JWT_ALGO: str = "HS256"
    AUTH_TOKEN_EXPIRE_DAYS: int = 7
    GUEST_SESSION_EXPIRE_DAYS: int = 30
    PASS_HASH_SCHEME: str = "bcrypt"
    DEFAULT_ROLE: str = "user"

    # flat shipping fees by destination
    SHIPPING_INSIDE_DHAKA: int = 80
    SHIPPING_OUTSIDE_DHAKA: int = 150

    STRICT_ORDER_TRANSITIONS: bool = True
    MAX_CART_LINE_QTY: int = 1000
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    EMAIL_BACKEND: str = "log"      # "log" / "smtp"
    SMTP_HOST: str | None = None
    SMTP_PORT: int = 587
    SMTP_USER: str | None = None
    SMTP_PASSWORD: str | None = None
    SMTP_FROM: str = "noreply@ecommerce.com"
    SMTP_TIMEOUT_SECONDS: float = 10.0

    class Config:
        env_file = ".env"
        extra="ignore"

config_settings = Settings()
