from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase

# jsonb en Postgres, JSON genérico en otros motores (sqlite en tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")

class Base(DeclarativeBase):
    pass
