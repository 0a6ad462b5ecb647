from sqlalchemy import Column, String, DateTime, func
from app.database import Base


class SchemaMigration(Base):
    """Startup data migrations that have already run on this database."""
    __tablename__ = "schema_migrations"

    version = Column(String, primary_key=True)
    applied_at = Column(DateTime(timezone=True), server_default=func.now())
