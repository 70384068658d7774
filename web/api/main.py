"""FastAPI application for the Courtside tournament API."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from tournament.models.base import init_db
from tournament.services.errors import CourtsideError
from web.api.auth_routes import router as auth_router
from web.api.bracket_routes import router as bracket_router
from web.api.routes import router as api_router

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger("courtside.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    yield


app = FastAPI(title="Courtside Tournament API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(api_router)
app.include_router(bracket_router)
app.include_router(auth_router)


@app.exception_handler(CourtsideError)
async def courtside_error_handler(request: Request, exc: CourtsideError):
    """Map domain errors to JSON responses with the error's status code."""
    if exc.status_code >= 500:
        logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc.message, exc_info=exc)
    else:
        logger.warning("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.get("/api/health")
async def health():
    return {"status": "ok"}
