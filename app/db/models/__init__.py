# Registra todos los modelos en Base.metadata
from app.db.models.profile import Profile
from app.db.models.workspace import Workspace, WorkspaceMember
from app.db.models.chatflow import Chatflow, ChatflowSubmission
from app.db.models.audit_log import AuditLog

__all__ = ["Profile", "Workspace", "WorkspaceMember", "Chatflow", "ChatflowSubmission", "AuditLog"]
