from sqlalchemy import Column, String, Text, DateTime, ForeignKey, func
from app.db.base import Base, JSONType
from app.utils.ids import new_id
from app.utils.timeutils import utcnow

# Ciclo de la generación en background
GENERATION_PENDING = "PENDING"
GENERATION_RUNNING = "RUNNING"
GENERATION_COMPLETED = "COMPLETED"
GENERATION_FAILED = "FAILED"

class Chatflow(Base):
    __tablename__ = "chatflows"
    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    description = Column(Text)
    schema = Column(JSONType, nullable=False, default=dict)   # {} mientras se genera
    status = Column(String, nullable=False, default="DRAFT")  # DRAFT | PUBLISHED | ARCHIVED
    share_url = Column(String, unique=True, nullable=False, index=True)
    workspace_id = Column(String, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True)

    generation_status = Column(String)   # null si nunca pasó por la generación
    generation_error = Column(Text)

    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now())

class ChatflowSubmission(Base):
    __tablename__ = "chatflow_submissions"
    id = Column(String, primary_key=True, default=new_id)
    status = Column(String, nullable=False, default="IN_PROGRESS")   # IN_PROGRESS | COMPLETED | ABANDONED
    data = Column(JSONType, nullable=False, default=dict)
    ai_summary = Column(Text)
    completed_at = Column(DateTime(timezone=True))
    chatflow_id = Column(String, ForeignKey("chatflows.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now())
