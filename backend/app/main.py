"""
StayFinder 主应用入口
酒店检索与预订 API：账户角色审核 + 房量一致性
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.config import settings
from app.database import init_db
from app.exceptions import register_exception_handlers
from app.logging_config import setup_logging
from app.routers import auth, hotels, bookings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    setup_logging(settings.LOG_LEVEL)
    init_db()
    logger.info(f"{settings.APP_NAME} started (owner re-request policy: {settings.OWNER_REREQUEST_POLICY})")

    yield

    logger.info(f"{settings.APP_NAME} stopped")


# 创建应用
app = FastAPI(
    title=f"{settings.APP_NAME} - 酒店检索与预订",
    description="酒店检索、业主申请审核与房量一致的预订服务",
    version="1.0.0",
    lifespan=lifespan
)

# CORS 配置
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# 注册路由
app.include_router(auth.router)
app.include_router(hotels.router)
app.include_router(bookings.router)


@app.get("/")
def root():
    """根路径"""
    return {
        "name": settings.APP_NAME,
        "version": "1.0.0",
        "description": "酒店检索与预订 API"
    }


@app.get("/health")
def health_check():
    """健康检查"""
    return {"status": "healthy"}
