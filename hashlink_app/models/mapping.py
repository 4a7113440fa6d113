from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.sql import func

from hashlink_app.database.connection import Base


class Mapping(Base):
    """
    Token -> original URL.

    Rows are inserted once and never updated: the token is the primary key,
    so two URLs can never share it.
    """
    __tablename__ = "mappings"

    # 64 hex chars from SHA-256 + 128 from SHA-512 at most
    token = Column(String(192), primary_key=True)
    url = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
