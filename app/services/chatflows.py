import logging
from typing import Any, Dict, List, Optional
from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import settings
from app.db.models.chatflow import Chatflow, ChatflowSubmission, GENERATION_FAILED, GENERATION_PENDING
from app.db.models.workspace import Workspace
from app.schemas.chatflow import ChatflowUpdate, is_generated
from app.services.audit import log_api_action
from app.services.workspaces import get_membership, member_workspace_ids
from app.utils.ids import random_slug
from app.utils.timeutils import format_short_datetime

logger = logging.getLogger(__name__)

UNTITLED = "Untitled Chatflow"

# ====== SHARE URL ======
async def share_url_exists(session: AsyncSession, share_url: str) -> bool:
    q = await session.execute(select(Chatflow.id).where(Chatflow.share_url == share_url))
    return q.scalar_one_or_none() is not None

async def unique_share_url(session: AsyncSession, length: Optional[int] = None) -> str:
    length = length or settings.share_url_length
    share_url = random_slug(length)
    # Sin tope de intentos: con 36^8 combinaciones una colisión es rarísima
    while await share_url_exists(session, share_url):
        share_url = random_slug(length)
    return share_url

# ====== LISTADO ======
async def list_chatflows(session: AsyncSession, *, user_id: str, workspace_slug: Optional[str] = None) -> List[Dict[str, Any]]:
    workspace_ids = await member_workspace_ids(session, profile_id=user_id, slug=workspace_slug)
    if not workspace_ids:
        return []

    submissions = (
        select(func.count(ChatflowSubmission.id))
        .where(ChatflowSubmission.chatflow_id == Chatflow.id)
        .correlate(Chatflow)
        .scalar_subquery()
    )
    stmt = (
        select(Chatflow, Workspace.name, Workspace.slug, submissions.label("submissions"))
        .join(Workspace, Workspace.id == Chatflow.workspace_id)
        .where(Chatflow.workspace_id.in_(workspace_ids))
        .order_by(Chatflow.created_at.desc())
    )
    rows = (await session.execute(stmt)).all()
    return [
        {
            "id": cf.id,
            "name": cf.name or UNTITLED,
            "status": cf.status,
            "submissions": count or 0,
            "workspaceName": ws_name,
            "workspaceSlug": ws_slug,
            "date": format_short_datetime(cf.created_at),
            "rawDate": cf.created_at,
        }
        for cf, ws_name, ws_slug, count in rows
    ]

# ====== LECTURA CON CONTROL DE ACCESO ======
async def get_member_chatflow(session: AsyncSession, *, chatflow_id: str, user_id: str) -> Chatflow:
    """Chatflow si el usuario es miembro de su workspace. Para no-miembros también es 404."""
    chatflow = await session.get(Chatflow, chatflow_id)
    if not chatflow:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chatflow not found")
    membership = await get_membership(session, profile_id=user_id, workspace_id=chatflow.workspace_id)
    if not membership:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chatflow not found")
    return chatflow

async def count_submissions(session: AsyncSession, chatflow_id: str) -> int:
    q = await session.execute(
        select(func.count(ChatflowSubmission.id)).where(ChatflowSubmission.chatflow_id == chatflow_id)
    )
    return q.scalar_one()

async def chatflow_detail(session: AsyncSession, chatflow: Chatflow) -> Dict[str, Any]:
    return {
        "id": chatflow.id,
        "name": chatflow.name,
        "description": chatflow.description,
        "schema": chatflow.schema,
        "status": chatflow.status,
        "shareUrl": chatflow.share_url,
        "submissions": await count_submissions(session, chatflow.id),
        "createdAt": chatflow.created_at,
        "updatedAt": chatflow.updated_at,
    }

def generation_result(chatflow: Chatflow) -> Dict[str, Any]:
    if chatflow.generation_status == GENERATION_FAILED:
        return {"status": "failed", "error": chatflow.generation_error or "Generation failed"}
    if not is_generated(chatflow.schema):
        return {"status": "running"}
    return {"status": "completed", "result": {**chatflow.schema, "name": chatflow.name}}

async def list_submissions(session: AsyncSession, chatflow_id: str) -> List[Dict[str, Any]]:
    q = await session.execute(
        select(ChatflowSubmission)
        .where(ChatflowSubmission.chatflow_id == chatflow_id)
        .order_by(ChatflowSubmission.created_at.desc())
    )
    return [
        {
            "id": s.id,
            "status": s.status,
            "data": s.data,
            "aiSummary": s.ai_summary,
            "completedAt": s.completed_at,
            "createdAt": s.created_at,
            "updatedAt": s.updated_at,
        }
        for s in q.scalars()
    ]

# ====== ESCRITURA ======
async def create_placeholder_chatflow(session: AsyncSession, *, workspace_id: str, description: str) -> Chatflow:
    chatflow = Chatflow(
        name=UNTITLED,
        description=description,
        schema={},
        status="DRAFT",
        share_url=await unique_share_url(session),
        workspace_id=workspace_id,
        generation_status=GENERATION_PENDING,
    )
    session.add(chatflow)
    await session.commit()
    await session.refresh(chatflow)
    return chatflow

async def publish_chatflow(
    session: AsyncSession,
    *,
    user_id: str,
    workspace_id: str,
    name: str,
    description: Optional[str],
    schema: Dict[str, Any],
) -> Chatflow:
    share_url = await unique_share_url(session)
    chatflow = Chatflow(
        name=name,
        description=description or "",
        schema=schema,
        status="PUBLISHED",
        share_url=share_url,
        workspace_id=workspace_id,
    )
    session.add(chatflow)
    await session.commit()
    await session.refresh(chatflow)
    logger.info("[PUBLISH] chatflow %s published as /c/%s", chatflow.id, share_url)

    await log_api_action(
        session, user_id, "CREATE", "chatflows", chatflow.id,
        {"new": {"name": name, "workspaceId": workspace_id}},
    )
    # el audit puede haber hecho rollback (expira las instancias)
    await session.refresh(chatflow)
    return chatflow

async def update_chatflow(session: AsyncSession, chatflow: Chatflow, *, user_id: str, payload: ChatflowUpdate) -> Chatflow:
    changes: Dict[str, Any] = {}
    if payload.name is not None:
        changes["name"] = payload.name
    if payload.description is not None:
        changes["description"] = payload.description
    if payload.status is not None:
        changes["status"] = payload.status
    if payload.form_schema is not None:
        changes["schema"] = payload.form_schema.model_dump(by_alias=True, exclude_none=True)

    if not changes:
        return chatflow

    old = {key: getattr(chatflow, key) for key in changes}
    for key, value in changes.items():
        setattr(chatflow, key, value)
    await session.commit()

    await log_api_action(session, user_id, "UPDATE", "chatflows", chatflow.id, {"old": old, "new": changes})
    await session.refresh(chatflow)
    return chatflow
