# main.py
import logging
from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi_limiter import FastAPILimiter
from redis.exceptions import RedisError
from starlette.middleware.cors import CORSMiddleware
import routes
from config.database import Database
from config.settings import settings
from controller.controller_dependencies import get_tiered_cache
from core.object_storage import ObjectStorageClient
from repository.distributed_cache import DistributedCache
from repository.memory_cache import MemoryCache
from service.cache_service import TieredCache
from util.enums import Color, Environment, ErrorMessage
from util.errors import AppError
from util.logger import init_logger

logger = logging.getLogger(__name__)


async def _real_ip(request: Request) -> str:
    if settings.TRUST_PROXY:
        fwd = request.headers.get("x-forwarded-for")
        if fwd:
            return fwd.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


@asynccontextmanager
async def lifespan(fastApi: FastAPI):
    init_logger()
    print(f"{Color.GREEN}Initializing...{Color.RESET}")

    database = Database()
    await database.startup()

    # No connection yet: the client opens its socket on the first command
    distributed = DistributedCache()
    fastApi.state.database = database
    fastApi.state.cache = TieredCache(
        MemoryCache(max_entries=settings.MEMORY_CACHE_MAX_ENTRIES), distributed
    )
    fastApi.state.storage = ObjectStorageClient()

    # The limiter's script load is the first Redis command
    try:
        await FastAPILimiter.init(distributed.client, identifier=_real_ip)
    except (RedisError, OSError) as e:
        # Uploads still work, only unthrottled
        FastAPILimiter.redis = None
        logger.warning("ratelimit.disabled err=%s", type(e).__name__)
    print(f"{Color.BLUE}Server Started{Color.RESET}")

    try:
        yield
    finally:
        try:
            await distributed.close()
        except Exception as e:
            print("Error closing Redis:", e)
        await database.shutdown()
        print(f"{Color.RED}Server Shutdown{Color.RESET}")


app: FastAPI = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.ALLOWED_ORIGIN],
    allow_credentials=True,  # Allow cookies and other credentials
    allow_methods=["GET", "POST", "DELETE"],  # Allowed HTTP Methods
    allow_headers=["Authorization", "Content-Type", "Accept", settings.SUBJECT_HEADER],
)


@app.get("/healthz")
async def healthz(cache: TieredCache = Depends(get_tiered_cache)):
    # Redis is best-effort, so a down cache degrades the report but not the status
    return {"ok": True, "cache": "up" if await cache.ping() else "down"}


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content=exc.detail)


@app.exception_handler(RequestValidationError)
async def validation_handler(request: Request, exc: RequestValidationError):
    info = ErrorMessage.INVALID_REQUEST.value
    fields = [".".join(str(x) for x in err.get("loc", [])) for err in exc.errors()]
    return JSONResponse(
        status_code=info.http_status,
        content={"ok": False, "error": info.code, "message": info.message, "fields": fields},
    )


@app.exception_handler(429)
async def ratelimit_handler(request: Request, exc):
    return JSONResponse(
        status_code=429,
        content={
            "ok": False,
            "error": "rate_limited",
            "message": f"Too many requests. Try again in {settings.RATE_LIMIT_SECONDS}s.",
        },
        headers={"Retry-After": str(settings.RATE_LIMIT_SECONDS)},
    )


routes.register_routes(app)

if __name__ == "__main__":
    import uvicorn

    reload = settings.APP_ENV == Environment.DEV
    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=reload)
