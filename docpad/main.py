import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from docpad.api.http import documents_router, health_router
from docpad.core.config import settings
from docpad.core.db import engine, init_models

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_models(engine)
    logger.info("Database tables are ready")
    yield
    await engine.dispose()


app = FastAPI(
    title="docpad",
    description="Документы в markdown: создание, редактирование и полнотекстовый поиск",
    version="1.0.0",
    lifespan=lifespan
)

# Настройка CORS для JSON-клиентов
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Подключаем роутеры
app.include_router(health_router)
app.include_router(documents_router)


@app.get("/")
async def root():
    """Корневой эндпоинт - список документов"""
    return RedirectResponse(url="/documents")
