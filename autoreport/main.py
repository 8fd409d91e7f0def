import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from autoreport.clients import router as clients_router
from autoreport.config import get_settings
from autoreport.database import init_db
from autoreport.errors import (
    AlreadyExistsError,
    AuthError,
    InternalError,
    InvalidCredentialsError,
    InvalidTokenError,
    NoPendingResetError,
    NotFoundError,
    TokenExpiredError,
    TrialExpiredError,
    UnauthorizedError,
)
from autoreport.users import router as users_router

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

ERROR_STATUS = {
    AlreadyExistsError: 409,
    NotFoundError: 404,
    InvalidCredentialsError: 401,
    UnauthorizedError: 401,
    TrialExpiredError: 403,
    TokenExpiredError: 400,
    InvalidTokenError: 400,
    NoPendingResetError: 400,
    InternalError: 500,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("%s backend running (%s)", settings.app_name, settings.environment.value)
    yield


app = FastAPI(
    title=settings.app_name,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url=None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError):
    status_code = ERROR_STATUS.get(type(exc), 400)
    headers = None

    if isinstance(exc, InternalError):
        logger.error("Internal error on %s %s", request.method, request.url.path, exc_info=exc.__cause__)
    elif isinstance(exc, UnauthorizedError):
        headers = {"WWW-Authenticate": "Bearer"}

    return JSONResponse(status_code=status_code, content={"detail": exc.detail}, headers=headers)


app.include_router(users_router)
app.include_router(clients_router)


@app.get("/")
def home():
    return {"status": f"{settings.app_name} backend is running with authentication and trial system"}


@app.get("/health")
def health():
    return {"status": "healthy"}
