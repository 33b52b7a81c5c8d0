from sqlalchemy import Column, String, DateTime, func
from app.db.base import Base
from app.utils.timeutils import utcnow

class Profile(Base):
    __tablename__ = "profiles"
    id = Column(String, primary_key=True)          # sub de Supabase
    email = Column(String, unique=True, nullable=False)
    name = Column(String)
    avatar_url = Column(String)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now())
