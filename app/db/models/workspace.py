from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, func
from app.db.base import Base
from app.utils.ids import new_id
from app.utils.timeutils import utcnow

class Workspace(Base):
    __tablename__ = "workspaces"
    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now())

class WorkspaceMember(Base):
    __tablename__ = "workspace_members"
    __table_args__ = (UniqueConstraint("profile_id", "workspace_id", name="workspace_members_profile_id_workspace_id_key"),)

    id = Column(String, primary_key=True, default=new_id)
    role = Column(String, nullable=False, default="MEMBER")   # OWNER | ADMIN | MEMBER
    profile_id = Column(String, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    workspace_id = Column(String, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
