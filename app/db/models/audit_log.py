from sqlalchemy import Column, String, DateTime, func
from app.db.base import Base, JSONType
from app.utils.ids import new_id
from app.utils.timeutils import utcnow

class AuditLog(Base):
    __tablename__ = "audit_logs"
    id = Column(String, primary_key=True, default=new_id)
    user_id = Column(String, index=True)
    action = Column(String, nullable=False, index=True)       # CREATE | UPDATE | DELETE
    table_name = Column(String, nullable=False, index=True)
    record_id = Column(String)
    old_data = Column(JSONType)
    new_data = Column(JSONType)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), index=True)
