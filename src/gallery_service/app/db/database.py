from loguru import logger
from tortoise import Tortoise, connections

from ..core.config import get_settings

MODEL_MODULES = [
    "src.gallery_service.app.models.user",
    "src.gallery_service.app.models.image",
    "src.gallery_service.app.models.like",
]


async def init_db(db_url: str | None = None):
    try:
        database_url = db_url or get_settings().absolute_database_url

        # Tortoise expects sqlite://<path> rather than the SQLAlchemy form
        if database_url.startswith("sqlite:///"):
            database_url = database_url.replace("sqlite:///", "sqlite://")

        await Tortoise.init(
            db_url=database_url,
            modules={"models": MODEL_MODULES},
        )

        await Tortoise.generate_schemas(safe=True)

        logger.info("Database initialized successfully")

    except Exception as e:
        logger.error(f"Error initializing database: {e}")
        raise


async def close_db():
    try:
        await Tortoise.close_connections()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error closing database: {e}")
        raise


async def check_database_health() -> bool:
    try:
        conn = connections.get("default")
        await conn.execute_query("SELECT 1")

        return True
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return False
