"""
宾馆床位预订服务 - 应用入口
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from guesthouse.config import settings
from guesthouse.database import init_db, SessionLocal
from guesthouse.routers import bookings, beds, reports

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # 初始化数据库
    init_db()

    # ========== 邮件通知 ==========
    from guesthouse_core.notification import NotificationChannelRegistry
    from guesthouse.notification import EmailChannel
    from guesthouse.services.notification_service import BookingNotificationHandlers

    channel_registry = NotificationChannelRegistry()
    if settings.ENABLE_EMAIL_NOTIFICATIONS:
        channel_registry.register(EmailChannel.from_settings(settings))
        logger.info("Email notification channel registered")
    notification_handlers = BookingNotificationHandlers(
        channel_registry, admin_email=settings.ADMIN_NOTIFICATION_EMAIL or ""
    )
    notification_handlers.register()

    # ========== 可用性巡检 ==========
    from guesthouse_core.scheduler import SchedulerRegistry
    from guesthouse.services.scheduler_backend import APSchedulerBackend
    from guesthouse.services.sweep_service import schedule_availability_sweep

    scheduler_registry = SchedulerRegistry()
    if settings.ENABLE_AVAILABILITY_SWEEP:
        backend = APSchedulerBackend()
        schedule_availability_sweep(backend, SessionLocal, settings.AVAILABILITY_SWEEP_CRON)
        backend.start()
        scheduler_registry.set_backend(backend)

    yield

    # 关闭时清理
    backend = scheduler_registry.get_backend()
    if backend is not None:
        backend.shutdown()
        scheduler_registry.clear()
    notification_handlers.unregister()
    channel_registry.clear()


# 创建应用
app = FastAPI(
    title=settings.APP_NAME,
    description="宾馆床位预订与库存一致性服务",
    version="1.0.0",
    lifespan=lifespan
)

# CORS 配置
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # 生产环境应限制具体域名
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册路由
app.include_router(bookings.router)
app.include_router(beds.router)
app.include_router(reports.router)


@app.get("/")
def root():
    """根路径"""
    return {"name": settings.APP_NAME, "version": "1.0.0"}


@app.get("/health")
def health_check():
    """健康检查"""
    return {"status": "healthy"}
