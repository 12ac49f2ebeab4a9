from datetime import datetime
from sqlalchemy import Integer, ForeignKey, DateTime, Enum, Text, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..db import Base
from .listing import ListingKind

class Review(Base):
    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    author_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    target_type: Mapped[ListingKind] = mapped_column(Enum(ListingKind), nullable=False)
    target_id: Mapped[int] = mapped_column(Integer, nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    author: Mapped["User"] = relationship()

Index("ix_reviews_target", Review.target_type, Review.target_id)
