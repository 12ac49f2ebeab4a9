from datetime import datetime
from sqlalchemy import Integer, String, ForeignKey, DateTime, Enum, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from ..db import Base
from .listing import ListingKind

class Favorite(Base):
    __tablename__ = "favorites"
    # One row per (user, listing); the constraint is what makes toggling race-free
    __table_args__ = (UniqueConstraint("user_id", "item_type", "item_id", name="uq_favorite_item"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    item_type: Mapped[ListingKind] = mapped_column(Enum(ListingKind), nullable=False)
    item_id: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
