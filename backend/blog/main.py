import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .database import engine, create_all
from .db_models import *  # noqa: F401,F403
from .config import settings
from .exceptions import setup_exception_handlers
from .middleware import setup_request_logging
from .auth.router import router as auth_router
from .posts.router import router as posts_router
from .utils.time import utcnow

# 로깅 설정 (stdout 출력)
log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
logging.basicConfig(
    level=log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)
logger.info(f"Application starting with log level: {settings.LOG_LEVEL}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_all()
    logger.info(f"Database ready; environment: {settings.ENVIRONMENT}")
    yield
    await engine.dispose()
    logger.info("Database connection closed")

app = FastAPI(title="Blog API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
setup_request_logging(app)
setup_exception_handlers(app)

# 라우터 등록
app.include_router(auth_router)
app.include_router(posts_router)


@app.get("/health", tags=["health"])
async def health():
    return {
        "success": True,
        "message": "Server is running",
        "timestamp": utcnow().isoformat(),
    }
