import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes.analyze import router as analyze_router
from api.routes.articles import router as articles_router
from api.routes.auth import router as auth_router
from api.routes.chat import router as chat_router
from api.routes.instructor import router as instructor_router
from api.routes.profile import router as profile_router
from api.routes.socraticbot import router as socraticbot_router
from deepreview.config import Config
from deepreview.database.db.models import Base
from deepreview.database.db.session import engine
from deepreview.service.llm_service import LLMRateLimitError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create any missing tables on startup
    Base.metadata.create_all(bind=engine)
    yield


app = FastAPI(title="DeepReview API", lifespan=lifespan)

# dev: allow every origin (no credentials with "*"), otherwise the configured list
is_dev = Config.env == "development"

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if is_dev else Config.cors_origins,
    allow_credentials=not is_dev,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Retry-After"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(LLMRateLimitError)
async def rate_limit_handler(request: Request, exc: LLMRateLimitError):
    logger.warning(f"⏳ Rate limit on {request.url.path}, retry after {exc.retry_after_seconds}s")
    return JSONResponse(
        status_code=429,
        content={
            "error": "RATE_LIMIT",
            "message": "Rate limit reached, please try again in a few seconds",
            "retryAfterSeconds": exc.retry_after_seconds,
        },
        headers={"Retry-After": str(exc.retry_after_seconds)},
    )


app.include_router(auth_router)
app.include_router(articles_router)
app.include_router(analyze_router)
app.include_router(chat_router)
app.include_router(socraticbot_router)
app.include_router(profile_router)
app.include_router(instructor_router)


@app.get("/api/health")
async def health_check():
    return {"status": "ok"}
