import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.core.config import settings
from app.core.errors import install_exception_handlers
from app.core.logging import configure_logging
from app.core.rate_limit import RateLimitMiddleware, SlidingWindowRateLimiter
from app.dependencies import get_completion_gateway, get_conversation_store
from app.api.chat import router as chat_router
from app.api.generate import router as generate_router
from app.api.history import router as history_router
from app.api.upload import router as upload_router

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    # Missing credentials are fatal before any request is served
    settings.check_startup()
    store = get_conversation_store()
    gateway = get_completion_gateway()
    logger.info(f"{settings.product_name} {settings.app_version} started ({settings.resolved_store_backend()} store, model {settings.model})")
    yield
    await gateway.aclose()
    await store.close()

app = FastAPI(
    title=settings.service_name,
    version=settings.app_version,
    lifespan=lifespan
)

app.state.rate_limiter = SlidingWindowRateLimiter(
    max_requests=settings.rate_limit_max_requests,
    window_seconds=settings.rate_limit_window_seconds,
)
# Registered before CORS so CORS wraps it
app.add_middleware(RateLimitMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_exception_handlers(app)

app.include_router(chat_router, prefix="/api")
app.include_router(generate_router, prefix="/api")
app.include_router(history_router, prefix="/api")
app.include_router(upload_router, prefix="/api")

@app.get("/health")
async def health():
    return {"status": "ok", "version": settings.app_version}
