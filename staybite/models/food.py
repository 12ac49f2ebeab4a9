from __future__ import annotations
import datetime as dt
from datetime import datetime, time
from typing import TYPE_CHECKING
from sqlalchemy import Integer, String, ForeignKey, Date, Time, Numeric, Text, Enum, DateTime, Boolean, Float, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..db import Base
from .listing import ListingStatus

if TYPE_CHECKING:
    from .user import User

class FoodExperience(Base):
    __tablename__ = "food_experiences"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    host_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    price_per_person: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    status: Mapped[ListingStatus] = mapped_column(Enum(ListingStatus), default=ListingStatus.DRAFT, nullable=False, index=True)
    cuisine_type: Mapped[str] = mapped_column(String(80), nullable=False, index=True)
    menu_description: Mapped[str | None] = mapped_column(Text)
    duration: Mapped[str | None] = mapped_column(String(50))
    language: Mapped[str | None] = mapped_column(String(50))
    max_guests: Mapped[int | None] = mapped_column(Integer)
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

    host: Mapped[User] = relationship(back_populates="food_experiences")
    images: Mapped[list[FoodExperienceImage]] = relationship(back_populates="experience", cascade="all, delete-orphan", order_by="FoodExperienceImage.display_order")
    availability: Mapped[list[FoodExperienceAvailability]] = relationship(back_populates="experience", cascade="all, delete-orphan", order_by="FoodExperienceAvailability.date")


class FoodExperienceImage(Base):
    __tablename__ = "food_experience_images"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    experience_id: Mapped[int] = mapped_column(ForeignKey("food_experiences.id"), nullable=False, index=True)
    image_path: Mapped[str] = mapped_column(String(500), nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    experience: Mapped[FoodExperience] = relationship(back_populates="images")


class FoodExperienceAvailability(Base):
    __tablename__ = "food_experience_availability"
    __table_args__ = (UniqueConstraint("experience_id", "date", name="uq_food_availability_date"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    experience_id: Mapped[int] = mapped_column(ForeignKey("food_experiences.id"), nullable=False, index=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    price_override: Mapped[float | None] = mapped_column(Numeric(10, 2, asdecimal=False))
    start_time: Mapped[time | None] = mapped_column(Time)
    end_time: Mapped[time | None] = mapped_column(Time)
    available_spots: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    experience: Mapped[FoodExperience] = relationship(back_populates="availability")
