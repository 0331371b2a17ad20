"""
应用配置
从环境变量 / .env 读取配置
"""
from typing import Optional
from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """应用设置"""

    # 应用基础配置
    APP_NAME: str = "GuestHouse Booking"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # 数据库配置
    DATABASE_URL: str = "sqlite:///./guesthouse.db"
    # SQLite 忙等待超时（秒），避免并发写入时无限阻塞
    DATABASE_BUSY_TIMEOUT: int = 30

    # JWT 配置（令牌由外部身份服务签发，此处仅校验）
    SECRET_KEY: str = "your-secret-key-change-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480

    # 床位可用性巡检
    ENABLE_AVAILABILITY_SWEEP: bool = True
    AVAILABILITY_SWEEP_CRON: str = "5 0 * * *"  # 每天 00:05

    # 邮件通知
    ENABLE_EMAIL_NOTIFICATIONS: bool = False
    SMTP_HOST: str = "localhost"
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_USE_TLS: bool = True
    MAIL_SENDER: str = ""
    ADMIN_NOTIFICATION_EMAIL: Optional[str] = None

    model_config = ConfigDict(env_file=".env", case_sensitive=True, extra="ignore")


# 全局设置实例
settings = Settings()
