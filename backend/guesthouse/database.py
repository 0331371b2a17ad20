"""
数据库配置 - SQLAlchemy 持久化层
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from guesthouse.config import settings


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False, "timeout": settings.DATABASE_BUSY_TIMEOUT}
    return {}


engine = create_engine(
    settings.DATABASE_URL,
    connect_args=_connect_args(settings.DATABASE_URL)
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """依赖注入：获取数据库会话"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """初始化数据库表"""
    from guesthouse.models import entities  # noqa
    Base.metadata.create_all(bind=engine)
