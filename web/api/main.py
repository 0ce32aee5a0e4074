"""FastAPI app for Gallery Gateway - submissions, shows and zip downloads."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from gallery.errors import GalleryError
from gallery.models.base import init_db

from web.api.auth_routes import router as auth_router
from web.api.download import router as download_router
from web.api.routes import router as api_router

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger("gallery")


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    yield


app = FastAPI(title="Gallery Gateway API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(api_router)
app.include_router(auth_router)
app.include_router(download_router)


@app.exception_handler(GalleryError)
async def gallery_error_handler(request: Request, exc: GalleryError):
    """Permission, validation and not-found errors carry a message meant for the user."""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Oops! Try again later."})


@app.get("/api/health")
async def health():
    return {"status": "ok"}
