# Categories for learning records
from sqlalchemy import CheckConstraint, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel


class Category(BaseModel):
    """Named bucket a learning record can belong to."""

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    __table_args__ = (
        UniqueConstraint("name", name="uq_categories_name"),
        CheckConstraint("length(name) <= 100", name="ck_categories_name_len"),
    )

    def __repr__(self) -> str:
        return f"<Category(name='{self.name}')>"

    @classmethod
    def normalize_name(cls, name: str) -> str:
        """Trim whitespace; categories keep their case."""
        clean = name.strip()
        if not clean:
            raise ValueError("Category name cannot be empty")
        return clean
