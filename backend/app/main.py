import logging

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .errors import register_exception_handlers
from .routes.calendar import app as calendar_app
from .routes.dashboard import app as dashboard_app
from .routes.health import app as health_app
from .routes.logs import app as logs_app
from .routes.plants import app as plants_app
from .routes.schedules import app as schedules_app
from .routes.test_admin import app as test_admin_app
from .routes.user_data import app as user_data_app

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Plant Care API")

# Register global exception handlers
register_exception_handlers(app)

if settings.cors_origins_list:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Mount all routers under /api
api_router = APIRouter(prefix="/api")
api_router.include_router(health_app)
api_router.include_router(plants_app)
api_router.include_router(schedules_app)
api_router.include_router(logs_app)
api_router.include_router(calendar_app)
api_router.include_router(dashboard_app)
api_router.include_router(user_data_app)

# Conditionally include test admin endpoints when TEST_MODE=1
if settings.test_mode:
    api_router.include_router(test_admin_app)

app.include_router(api_router)


# Top-level health endpoint for container health checks and uptime probes
@app.get("/health")
async def health_root():
    return {"status": "ok"}
