from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from loguru import logger

from src.gallery_service.app.api import ai, auth, images, internal
from src.gallery_service.app.api.error_handlers import register_exception_handlers
from src.gallery_service.app.core.config import get_settings
from src.gallery_service.app.core.dependencies import get_container
from src.gallery_service.app.core.logging import configure_logging
from src.gallery_service.app.db.database import close_db, init_db

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings)
    logger.info("Starting Gallery Service...")

    database_dir = Path(settings.absolute_database_url.replace("sqlite:///", "")).parent
    storage_dirs = [
        settings.absolute_uploads_dir,
        settings.absolute_temp_dir,
        str(database_dir),
    ]
    for dir_path in storage_dirs:
        Path(dir_path).mkdir(parents=True, exist_ok=True)

    logger.info("Storage directories initialized")

    await init_db()
    logger.info("Gallery Service startup complete")

    yield

    logger.info("Shutting down Gallery Service...")
    await get_container().cleanup()
    await close_db()


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        lifespan=lifespan,
        debug=settings.DEBUG,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(auth.router, prefix="/api", tags=["auth"])
    app.include_router(images.router, prefix="/api", tags=["images"])
    app.include_router(ai.router, prefix="/api", tags=["ai"])
    app.include_router(internal.router, prefix="/internal", tags=["internal"])

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "service": "gallery"}

    # Serve stored uploads at the same public path recorded on each image
    uploads_dir = Path(settings.absolute_uploads_dir)
    uploads_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=str(uploads_dir)), name="uploads")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.gallery_service.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info",
    )
