# Tag models for organizing learning records
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel

if TYPE_CHECKING:
    from .record import LearningRecord


class Tag(BaseModel):
    """Tag for learning records. Names are unique and case-sensitive."""

    __tablename__ = "tags"

    name: Mapped[str] = mapped_column(String(50), nullable=False)

    __table_args__ = (
        UniqueConstraint("name", name="uq_tags_name"),
        CheckConstraint("length(name) <= 50", name="ck_tags_name_len"),
        Index("idx_tags_name", "name"),
    )

    def __repr__(self) -> str:
        return f"<Tag(name='{self.name}')>"

    @classmethod
    def normalize_name(cls, name: str) -> str:
        """Clean up tag name (whitespace only, case is significant)."""
        clean = name.strip().lstrip("#")
        if not clean:
            raise ValueError("Tag name cannot be empty")
        return clean


class LearningTag(BaseModel):
    """Links learning records to tags."""

    __tablename__ = "learning_tags"

    learning_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("learning_records.id", ondelete="CASCADE"), nullable=False
    )
    tag_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tags.id", ondelete="CASCADE"), nullable=False
    )

    record: Mapped["LearningRecord"] = relationship(
        "LearningRecord", back_populates="tag_links", lazy="selectin"
    )
    tag: Mapped["Tag"] = relationship("Tag", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("learning_id", "tag_id", name="uq_learning_tags_learning_tag"),
        Index("idx_learning_tags_learning_id", "learning_id"),
        Index("idx_learning_tags_tag_id", "tag_id"),
    )

    def __repr__(self) -> str:
        return f"<LearningTag(learning_id={self.learning_id}, tag_id={self.tag_id})>"
