from fastapi import FastAPI

from app.api.api_v1.api import api_router
from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.core.logging import get_logger, setup_logging

app = FastAPI(title=settings.PROJECT_NAME)

register_exception_handlers(app)
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def on_startup():
    setup_logging(json_logs=settings.LOG_JSON, log_file=settings.LOG_TO_FILE)
    get_logger(module="main").info(
        "Dashboard arrancado",
        gateway=settings.GATEWAY_BASE_URL,
    )


@app.get("/", tags=["health"])
def read_root():
    return {"message": "ok"}
