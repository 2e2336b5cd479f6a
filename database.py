"""Database setup and models for the shared document store.

This module provides the engine factory and the document model used by the
remote variant to persist the overlay dataset, using SQLAlchemy.
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text, UniqueConstraint, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


class MapDocument(Base):
    """One stored document.

    Attributes:
        id: Primary key auto-incrementing ID.
        collection: Collection the document belongs to.
        document_id: Id of the document within its collection.
        content: Document body as a JSON string.
        revision: Incremented on every write.
        updated_at: When the document was last written.
    """

    __tablename__ = "documents"
    __table_args__ = (UniqueConstraint("collection", "document_id"),)

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    collection = Column(String(100), nullable=False, index=True)
    document_id = Column(String(100), nullable=False)
    content = Column(Text, nullable=False)
    revision = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


def create_session_factory(database_url: str):
    """Create an engine and session factory, creating tables if needed.

    Args:
        database_url: SQLAlchemy database URL.

    Returns:
        Tuple of (engine, sessionmaker).
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(database_url, connect_args=connect_args)
    Base.metadata.create_all(bind=engine)
    session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return engine, session_factory
