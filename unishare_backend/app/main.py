import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import router as api_router
from app.core.config import settings
from app.core.database import engine
from app.core.logging import configure_logging
from app.models.base import Base
import app.models  # noqa: F401

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="UniShare API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.on_event("startup")
def on_startup():
    Base.metadata.create_all(bind=engine)
    logger.info("UniShare API started (environment=%s)", settings.environment)


@app.get("/health")
def health_check():
    return {"status": "ok"}
