# app/routers/chatflows.py
import logging
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from app.db.session import get_session, get_session_factory
from app.middlewares.auth import current_user
from app.schemas.chatflow import (
    ChatflowOut, ChatflowUpdate, GenerateIn, GenerateOut, PublishIn,
)
from app.services.chatflows import (
    chatflow_detail, create_placeholder_chatflow, generation_result,
    get_member_chatflow, list_chatflows, list_submissions, publish_chatflow,
    update_chatflow,
)
from app.services.generation import SchemaGenerator, generate_chatflow_background, get_schema_generator
from app.services.workspaces import require_member_workspace

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chatflows"])

# === Listado (el path viejo /chatflow se mantiene para la UI) ===
@router.get("/chatflow")
@router.get("/chatflows")
async def list_chatflows_route(
    workspace_slug: Optional[str] = Query(default=None, alias="workspaceSlug"),
    user = Depends(current_user),
    session: AsyncSession = Depends(get_session),
):
    chatflows = await list_chatflows(session, user_id=user["sub"], workspace_slug=workspace_slug)
    return {"chatflows": chatflows}

# === Generación en background ===
@router.post("/chatflows/generate", response_model=GenerateOut)
async def start_generation_route(
    payload: GenerateIn,
    bg: BackgroundTasks,
    user = Depends(current_user),
    session: AsyncSession = Depends(get_session),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    generator: SchemaGenerator = Depends(get_schema_generator),
):
    workspace = await require_member_workspace(session, slug=payload.workspace_slug, profile_id=user["sub"])
    chatflow = await create_placeholder_chatflow(session, workspace_id=workspace.id, description=payload.description)

    # fire and forget: el resultado se consulta con GET /chatflows/generate/{id}
    bg.add_task(generate_chatflow_background, session_factory, chatflow.id, payload.description, generator)
    logger.info("[GENERATE] chatflow %s queued by %s", chatflow.id, user["sub"])
    return {"workflow_id": chatflow.id}

@router.get("/chatflows/generate/{chatflow_id}")
async def generation_status_route(
    chatflow_id: str,
    user = Depends(current_user),
    session: AsyncSession = Depends(get_session),
):
    chatflow = await get_member_chatflow(session, chatflow_id=chatflow_id, user_id=user["sub"])
    return generation_result(chatflow)

# === Publicación directa ===
@router.post("/chatflows/publish", response_model=ChatflowOut)
async def publish_chatflow_route(
    payload: PublishIn,
    user = Depends(current_user),
    session: AsyncSession = Depends(get_session),
):
    workspace = await require_member_workspace(session, slug=payload.workspace_slug, profile_id=user["sub"])
    return await publish_chatflow(
        session,
        user_id=user["sub"],
        workspace_id=workspace.id,
        name=payload.name,
        description=payload.description,
        schema=payload.form_schema.model_dump(),
    )

# === Detalle / edición ===
@router.get("/chatflows/{chatflow_id}")
async def get_chatflow_route(
    chatflow_id: str,
    user = Depends(current_user),
    session: AsyncSession = Depends(get_session),
):
    chatflow = await get_member_chatflow(session, chatflow_id=chatflow_id, user_id=user["sub"])
    return {"chatflow": await chatflow_detail(session, chatflow)}

@router.patch("/chatflows/{chatflow_id}")
async def update_chatflow_route(
    chatflow_id: str,
    payload: ChatflowUpdate,
    user = Depends(current_user),
    session: AsyncSession = Depends(get_session),
):
    chatflow = await get_member_chatflow(session, chatflow_id=chatflow_id, user_id=user["sub"])
    chatflow = await update_chatflow(session, chatflow, user_id=user["sub"], payload=payload)
    return {"success": True, "chatflow": ChatflowOut.model_validate(chatflow).model_dump(by_alias=True)}

@router.get("/chatflows/{chatflow_id}/submissions")
async def list_submissions_route(
    chatflow_id: str,
    user = Depends(current_user),
    session: AsyncSession = Depends(get_session),
):
    chatflow = await get_member_chatflow(session, chatflow_id=chatflow_id, user_id=user["sub"])
    return {"submissions": await list_submissions(session, chatflow.id)}
