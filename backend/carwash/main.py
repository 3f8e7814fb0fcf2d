import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import settings
from .core.errors import register_error_handlers
from .redis_client import redis_client
from .routers import auth, availability, bookings, catalog, manager, rewards
from .services.identity import get_identity_provider

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # the identity client is created on first use; close it if it exists
    if get_identity_provider.cache_info().currsize:
        get_identity_provider().close()
        get_identity_provider.cache_clear()
        logger.info("Identity provider client closed")


app = FastAPI(title="Car Wash Booking API", lifespan=lifespan)

register_error_handlers(app)

app.include_router(auth.router)
app.include_router(catalog.router)
app.include_router(availability.router)
app.include_router(bookings.router)
app.include_router(rewards.router)
app.include_router(manager.router)


@app.get("/health")
def health():
    try:
        redis_ok = bool(redis_client.ping())
    except Exception as e:
        logger.warning(f"Redis ping failed: {e}")
        redis_ok = False
    return {"status": "ok", "redis": redis_ok}
