"""
Social API
Handles: user registration/login, profiles, posts with likes and comments
Port: 5000 (PORT)

Every route answers with a JSON envelope:
- success: {"<resource>": ...} or {"msg": ...}
- failure: {"errors": [{"msg": ...}, ...]}
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from social_api.config import Settings
from social_api.database import init_db, make_engine, make_session_factory
from social_api.exceptions import ApiError
from social_api.routers import posts, profiles, users
from social_api.security import TokenService
from social_api.validation import field_error

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# ── Exception handlers ────────────────────────────────────────────────────────

async def api_error_handler(request: Request, exc: ApiError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"errors": [{"msg": str(exc.detail)}]}, headers=exc.headers)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        # later loc parts name pydantic union members, not request fields
        param = next((str(part) for part in err.get("loc", ()) if part != "body"), "body")
        errors.append(field_error(param, err.get("msg", "Invalid value"), err.get("input")))
    return JSONResponse(status_code=400, content=jsonable_encoder({"errors": errors}))


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"errors": [{"msg": "Server Error"}]})


# ── App factory ───────────────────────────────────────────────────────────────

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    engine = make_engine(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(engine)
        logger.info("Social API started on port %s", settings.port)
        yield
        engine.dispose()

    app = FastAPI(title="Social API", version="1.0.0", lifespan=lifespan)

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)
    app.state.token_service = TokenService(settings.secret_key, settings.token_expiry_seconds)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(users.router, prefix="/api/users", tags=["Users"])
    app.include_router(posts.router, prefix="/api/posts", tags=["Posts"])
    app.include_router(profiles.router, prefix="/api/profiles", tags=["Profiles"])

    @app.get("/")
    async def root():
        return {"app": "Social API", "version": "1.0.0", "docs": "/docs"}

    @app.get("/health")
    async def health():
        return {"status": "ok", "service": "social"}

    return app


def run():
    import uvicorn

    settings = Settings.from_env()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
