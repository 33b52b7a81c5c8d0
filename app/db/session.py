from typing import AsyncIterator
from fastapi import Depends
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from app.core.config import settings

# Engine asincrónico
engine = create_async_engine(settings.database_url, echo=False, future=True, pool_pre_ping=True)

# Session factory
AsyncSessionLocal = async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)

# La factory se inyecta como dependencia: los tests y las tareas en background la reemplazan
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return AsyncSessionLocal

# Dependency para inyectar sesión en endpoints
async def get_session(
    factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> AsyncIterator[AsyncSession]:
    async with factory() as session:
        yield session
