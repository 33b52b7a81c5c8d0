import logging
from typing import Any, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models.audit_log import AuditLog

logger = logging.getLogger(__name__)

async def log_api_action(
    session: AsyncSession,
    user_id: Optional[str],
    action: str,
    table_name: str,
    record_id: Optional[str] = None,
    data: Optional[dict[str, Any]] = None,
) -> None:
    """Registra una acción en audit_logs. Un fallo acá no rompe el request."""
    data = data or {}
    try:
        session.add(AuditLog(
            user_id=user_id,
            action=action,
            table_name=table_name,
            record_id=record_id,
            old_data=data.get("old"),
            new_data=data.get("new"),
        ))
        await session.commit()
    except Exception:
        logger.exception("[AUDIT] failed to log %s %s/%s", action, table_name, record_id)
        await session.rollback()
