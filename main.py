import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from starlette.middleware.cors import CORSMiddleware
from core.config_loader import settings

from employee.router import employee_router
from uploads.storage import URL_PREFIX
import models_bootstrap

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

openapi_tags = [
    {
        "name": "Employees",
        "description": "Employee records and profile pictures",
    },
    {
        "name": "Health Checks",
        "description": "Application health checks",
    }
]

app = FastAPI(openapi_tags=openapi_tags)

if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            str(origin).strip("/") for origin in settings.BACKEND_CORS_ORIGINS
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(employee_router, prefix="/api")

# stored profile pictures are served back under their reference path
Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
app.mount(URL_PREFIX, StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")


@app.get("/health", tags=['Health Checks'])
@app.get("/api/health", tags=['Health Checks'], include_in_schema=False)
def read_root():
    return {"health": "true"}
