import logging
import time
import uuid
import uvicorn
from fastapi import FastAPI, Request
from dotenv import load_dotenv
from endpoints.webhook import router as webhook_router
from endpoints.push import router as push_router
from core.http_client import init_async_client, close_async_client
from core.config import settings
from core.errors import register_exception_handlers
from core.logging import setup_logging, set_request_id, reset_request_id

load_dotenv()
setup_logging(settings.log_level)
app = FastAPI()

app.include_router(webhook_router)
app.include_router(push_router)
register_exception_handlers(app)

http_logger = logging.getLogger("http.request")

@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-Id") or uuid.uuid4().hex
    token = set_request_id(request_id)
    start = time.perf_counter()
    status = 500
    try:
        response = await call_next(request)
        status = response.status_code
        response.headers["X-Request-Id"] = request_id
        return response
    finally:
        duration = time.perf_counter() - start
        http_request = {
            "requestMethod": request.method,
            "requestUrl": str(request.url),
            "status": status,
            "userAgent": request.headers.get("user-agent"),
            "remoteIp": request.client.host if request.client else None,
            "protocol": f"HTTP/{request.scope.get('http_version', '1.1')}",
            "latency": f"{duration:.6f}s",
        }
        request_size = request.headers.get("content-length")
        if request_size:
            http_request["requestSize"] = request_size
        http_logger.info("HTTP request", extra={"httpRequest": http_request})
        reset_request_id(token)

@app.on_event("startup")
async def startup() -> None:
    settings.validate_runtime()
    init_async_client()
    logging.getLogger(__name__).info(
        "LINE webhook responder started",
        extra={"url": f"http://localhost:{settings.port}", "environment": settings.environment},
    )

@app.on_event("shutdown")
async def shutdown() -> None:
    await close_async_client()

@app.get("/healthz")
def root():
    return {"message": "LINE webhook responder running"}

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_config=None)
