"""Application configuration"""
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Environment
    ENVIRONMENT: str = "development"  # development | production

    # Database
    DATABASE_URL: str = "sqlite:///./mssp_console.db"
    DATABASE_POOL_RECYCLE: int = 3600  # Recycle connections after 1 hour

    # Session tokens
    JWT_SECRET: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    SESSION_EXPIRE_SECONDS: int = 28800     # 8 hours, absolute
    SESSION_COOKIE_NAME: str = "token"

    # Pending MFA enrollment (issued by /login, consumed by /setup-mfa)
    MFA_SETUP_COOKIE_NAME: str = "mfa_setup"
    MFA_SETUP_EXPIRE_SECONDS: int = 600

    # Static principals
    SUPERADMIN_USERNAME: str = "superadmin"
    SUPERADMIN_PASSWORD: str = "superadmin-password-change-in-production"
    ADMIN_USERNAME: Optional[str] = None    # legacy shared admin login
    ADMIN_PASSWORD: Optional[str] = None

    # Secret store encryption (Fernet key); derived from JWT_SECRET when absent
    SECRET_STORE_KEY: Optional[str] = None

    # Password hashing
    BCRYPT_ROUNDS: int = 12

    # MFA
    MFA_ISSUER: str = "MSSP Console"
    MFA_VALID_WINDOW: int = 2               # +-2 steps of 30s
    MFA_BACKUP_CODE_COUNT: int = 10

    # Server
    HOST: str = "localhost"
    PORT: int = 7000
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: str = "http://localhost:7000"

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: List[str] = ["300/minute"]
    RATE_LIMIT_LOGIN: str = "10/minute"
    RATE_LIMIT_STORAGE_URI: str = "memory://"  # Use redis:// for production

    # Monitoring
    METRICS_ENABLED: bool = True
    METRICS_PATH: str = "/metrics"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string into list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.ENVIRONMENT.lower() == "production"


settings = Settings()
