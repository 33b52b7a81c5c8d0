from typing import List, Optional, Tuple
from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.models.workspace import Workspace, WorkspaceMember

async def get_workspace_by_slug(session: AsyncSession, slug: str) -> Optional[Workspace]:
    q = await session.execute(select(Workspace).where(Workspace.slug == slug))
    return q.scalar_one_or_none()

async def get_membership(session: AsyncSession, *, profile_id: str, workspace_id: str) -> Optional[WorkspaceMember]:
    q = await session.execute(
        select(WorkspaceMember).where(
            WorkspaceMember.profile_id == profile_id,
            WorkspaceMember.workspace_id == workspace_id,
        )
    )
    return q.scalar_one_or_none()

async def require_member_workspace(session: AsyncSession, *, slug: str, profile_id: str) -> Workspace:
    """Workspace por slug si el usuario es miembro; 404 si no existe, 403 si no es miembro."""
    workspace = await get_workspace_by_slug(session, slug)
    if not workspace:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workspace not found")
    membership = await get_membership(session, profile_id=profile_id, workspace_id=workspace.id)
    if not membership:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not a member of this workspace")
    return workspace

async def member_workspace_ids(session: AsyncSession, *, profile_id: str, slug: Optional[str] = None) -> List[str]:
    """IDs de los workspaces del usuario, opcionalmente filtrados por slug."""
    stmt = (
        select(WorkspaceMember.workspace_id, Workspace.slug)
        .join(Workspace, Workspace.id == WorkspaceMember.workspace_id)
        .where(WorkspaceMember.profile_id == profile_id)
    )
    rows: List[Tuple[str, str]] = (await session.execute(stmt)).all()
    # slug vacío = sin filtro
    return [wid for wid, wslug in rows if not slug or wslug == slug]
