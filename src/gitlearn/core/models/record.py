# Learning record model
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel

if TYPE_CHECKING:
    from .tag import LearningTag


class LearningRecord(BaseModel):
    """Something the user learned, optionally pointing at a file in their repo."""

    __tablename__ = "learning_records"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    explanatory_text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    understanding_level: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    reference_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    category_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )

    # repository path and the commit that last wrote it (pins historical views)
    github_path: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    commit_sha: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)

    owner_id: Mapped[int] = mapped_column(Integer, nullable=False)

    tag_links: Mapped[List["LearningTag"]] = relationship(
        "LearningTag",
        back_populates="record",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="LearningTag.id",
    )

    __table_args__ = (
        CheckConstraint(
            "understanding_level >= 0 AND understanding_level <= 5",
            name="ck_learning_records_level_range",
        ),
        CheckConstraint("length(title) <= 200", name="ck_learning_records_title_len"),
        Index("idx_learning_records_owner_id", "owner_id"),
        Index("idx_learning_records_category_id", "category_id"),
        Index("idx_learning_records_owner_created", "owner_id", "created_at"),
    )

    def __repr__(self) -> str:
        truncated = self.title if len(self.title) <= 30 else (self.title[:30] + "...")
        return f"<LearningRecord(title='{truncated}', owner_id={self.owner_id})>"

    @property
    def has_file(self) -> bool:
        return bool(self.github_path)

    def is_owned_by(self, owner_id: int) -> bool:
        return self.owner_id == owner_id
