import sys, asyncio, logging
from contextlib import asynccontextmanager
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.errors import install_exception_handlers
from app.core.log import configure_logging
from app.db.base import Base
from app.db import models  # noqa: F401  registra los modelos en Base.metadata
from app.db.session import engine

from app.routers import health
from app.routers import chatflows as chatflows_router
from app.routers import workflow_stub

load_dotenv()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

if sys.platform.startswith("win"):
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Crear tablas si no existen (MVP). En prod, usar migraciones.
@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Chatflow API started (env=%s)", settings.env)
    yield
    await engine.dispose()

app = FastAPI(title="Chatflow API", lifespan=lifespan)

# CORS (ajustá orígenes en prod)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_exception_handlers(app)

# Routers
app.include_router(health.router)
app.include_router(chatflows_router.router)       # /api/chatflow(s), /api/chatflows/generate, /api/chatflows/publish
app.include_router(workflow_stub.router)          # /api/test-workflow

# Opcional: ping rápido
@app.get("/")
async def root():
    return {"ok": True, "service": "chatflow-api", "routers": ["health", "chatflows", "test-workflow"]}
