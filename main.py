# main.py

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.database import engine, Base
from app.core.logging import setup_logging

# Importa os models para registrá-los no Base.metadata
from app.models.terminal import Terminal  # noqa: F401
from app.models.storage_rule import StorageRule, StoragePeriod  # noqa: F401

from app.api.storage_rules import router as storage_rules_router
from app.api.terminals import router as terminals_router

setup_logging(settings.LOG_LEVEL)

app = FastAPI(
    title="Terminal Storage Rules API",
    version="0.1.0",
)

# === CORS: liberar acesso do front ===
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup():
    Base.metadata.create_all(bind=engine)


app.include_router(terminals_router)
app.include_router(storage_rules_router)


@app.get("/health")
def health_check():
    return {"status": "ok"}
