from __future__ import annotations
import datetime as dt
from datetime import datetime
from typing import TYPE_CHECKING
from sqlalchemy import Integer, String, ForeignKey, Date, Numeric, Text, Enum, DateTime, Boolean, Float, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..db import Base
from .listing import ListingStatus

if TYPE_CHECKING:
    from .user import User

class Stay(Base):
    __tablename__ = "stays"
    # Deleted ids must never be handed to a new listing
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    host_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    price_per_night: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    status: Mapped[ListingStatus] = mapped_column(Enum(ListingStatus), default=ListingStatus.DRAFT, nullable=False, index=True)
    property_type: Mapped[str | None] = mapped_column(String(50))
    bedrooms: Mapped[int | None] = mapped_column(Integer)
    beds: Mapped[int | None] = mapped_column(Integer)
    bathrooms: Mapped[int | None] = mapped_column(Integer)
    max_guests: Mapped[int | None] = mapped_column(Integer)
    # Stored as JSON text or a comma-separated list; normalized on read
    amenities: Mapped[str | None] = mapped_column(Text)
    location_name: Mapped[str] = mapped_column(String(300), nullable=False, default="")
    address: Mapped[str | None] = mapped_column(String(300))
    city: Mapped[str | None] = mapped_column(String(120))
    state: Mapped[str | None] = mapped_column(String(120))
    zipcode: Mapped[str | None] = mapped_column(String(20), index=True)
    latitude: Mapped[float | None] = mapped_column(Float)
    longitude: Mapped[float | None] = mapped_column(Float)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    rating: Mapped[float | None] = mapped_column(Float)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    host: Mapped[User] = relationship(back_populates="stays")
    images: Mapped[list[StayImage]] = relationship(back_populates="stay", cascade="all, delete-orphan", order_by="StayImage.display_order")
    availability: Mapped[list[StayAvailability]] = relationship(back_populates="stay", cascade="all, delete-orphan", order_by="StayAvailability.date")


class StayImage(Base):
    __tablename__ = "stay_images"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    stay_id: Mapped[int] = mapped_column(ForeignKey("stays.id"), nullable=False, index=True)
    image_path: Mapped[str] = mapped_column(String(500), nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    stay: Mapped[Stay] = relationship(back_populates="images")


class StayAvailability(Base):
    __tablename__ = "stay_availability"
    __table_args__ = (UniqueConstraint("stay_id", "date", name="uq_stay_availability_date"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    stay_id: Mapped[int] = mapped_column(ForeignKey("stays.id"), nullable=False, index=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    price_override: Mapped[float | None] = mapped_column(Numeric(10, 2, asdecimal=False))

    stay: Mapped[Stay] = relationship(back_populates="availability")
