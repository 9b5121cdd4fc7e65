import logging
import time

from fastapi import FastAPI, Request

from .config import settings

logger = logging.getLogger(__name__)


def setup_request_logging(app: FastAPI) -> None:
    """요청 로그와 느린 요청 경고를 남기는 HTTP 미들웨어를 등록합니다."""

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        status_code = 500
        response = None
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            # 처리되지 않은 예외로 끝난 요청도 500으로 기록
            duration_ms = (time.perf_counter() - start) * 1000
            if settings.ENVIRONMENT != "test":
                logger.info(
                    "%s %s %s %.2f ms - %s",
                    request.method,
                    request.url.path,
                    status_code,
                    duration_ms,
                    response.headers.get("content-length", "-") if response is not None else "-",
                )
            if duration_ms > settings.SLOW_REQUEST_MS:
                logger.warning(
                    f"Slow request detected: {request.method} {request.url.path} - {duration_ms:.0f}ms"
                )
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        return response
