"""Wiki article database model."""

from sqlalchemy import Column, ForeignKey, Integer, String, Text

from .base import Base


class WikiContentModel(Base):
    __tablename__ = "wiki_content"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    content = Column(Text, nullable=False)  # HTML
    category = Column(String, nullable=False, index=True)
    created_by = Column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    last_updated = Column(String, nullable=False)

    __table_args__ = {"sqlite_autoincrement": True}
