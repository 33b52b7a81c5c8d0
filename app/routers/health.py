from fastapi import APIRouter, Depends
from sqlalchemy import text as sqltext
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.session import get_session

router = APIRouter(tags=["health"])

@router.get("/health")
async def health(session: AsyncSession = Depends(get_session)):
    try:
        await session.execute(sqltext("select 1"))
        db = {"ok": True}
    except SQLAlchemyError as e:
        db = {"ok": False, "error": str(e)[:200]}
    return {"ok": db["ok"], "database": db}
