from datetime import date, datetime, time
from typing import Optional, List
from pydantic import BaseModel, Field

from .models import ListingStatus, ListingKind

# ==== Shared ====

class HostOut(BaseModel):
    id: Optional[int] = None
    name: str
    image: str
    rating: float
    reviews: int


class ImageOut(BaseModel):
    id: Optional[int] = None
    url: str
    order: int
    is_primary: bool = False


class CoordinatesOut(BaseModel):
    lat: float
    lng: float


class AvailabilityDayOut(BaseModel):
    date: date
    price: float
    is_available: bool


# ==== Stays ====

class StayDetails(BaseModel):
    bedrooms: int
    beds: int
    bathrooms: int
    max_guests: int
    amenities: List[str]
    location: str
    property_type: str


class StayOut(BaseModel):
    id: int
    title: str
    description: str
    price_per_night: float
    status: ListingStatus
    image: str
    images: List[ImageOut]
    host: HostOut
    host_id: int
    details: StayDetails
    coordinates: CoordinatesOut
    zipcode: Optional[str] = None
    rating: float
    is_featured: bool = False
    availability: List[AvailabilityDayOut] = []

    class Config:
        use_enum_values = True


class StayCreateIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    price_per_night: float = Field(..., gt=0)
    property_type: Optional[str] = None
    bedrooms: Optional[int] = Field(None, ge=0)
    beds: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    max_guests: Optional[int] = Field(None, ge=1)
    amenities: List[str] = []
    location_name: str = ""
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipcode: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class StayUpdateIn(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    price_per_night: Optional[float] = Field(None, gt=0)
    property_type: Optional[str] = None
    bedrooms: Optional[int] = Field(None, ge=0)
    beds: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    max_guests: Optional[int] = Field(None, ge=1)
    amenities: Optional[List[str]] = None
    location_name: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipcode: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class RangeQuoteOut(BaseModel):
    check_in: date
    check_out: date
    bookable: bool
    nights: int
    nightly_prices: List[float]
    total: float


# ==== Food experiences ====

class FoodDetails(BaseModel):
    duration: str
    group_size: str
    includes: List[str]
    language: str
    location: str


class FoodExperienceOut(BaseModel):
    id: int
    title: str
    description: str
    price_per_person: float
    status: ListingStatus
    cuisine_type: str
    menu_description: str
    location_name: str
    image: str
    images: List[ImageOut]
    host: HostOut
    host_id: int
    details: FoodDetails
    coordinates: Optional[CoordinatesOut] = None
    zipcode: Optional[str] = None
    rating: float
    is_featured: bool = False

    class Config:
        use_enum_values = True


class FoodCreateIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    price_per_person: float = Field(..., gt=0)
    cuisine_type: str = Field(..., min_length=1, max_length=80)
    menu_description: Optional[str] = None
    duration: Optional[str] = None
    language: Optional[str] = None
    max_guests: Optional[int] = Field(None, ge=1)
    location_name: str = ""
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipcode: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class FoodUpdateIn(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    price_per_person: Optional[float] = Field(None, gt=0)
    cuisine_type: Optional[str] = Field(None, min_length=1, max_length=80)
    menu_description: Optional[str] = None
    duration: Optional[str] = None
    language: Optional[str] = None
    max_guests: Optional[int] = Field(None, ge=1)
    location_name: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipcode: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class FoodSessionOut(BaseModel):
    date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    available_spots: int


class CategoryCountOut(BaseModel):
    cuisine_type: str
    count: int


# ==== Host management ====

class StatusIn(BaseModel):
    status: ListingStatus


class AvailabilityIn(BaseModel):
    start_date: date
    end_date: date  # exclusive
    is_available: bool = True
    price_override: Optional[float] = Field(None, gt=0)
    available_spots: Optional[int] = Field(None, ge=0)
    start_time: Optional[time] = None
    end_time: Optional[time] = None


class ReorderIn(BaseModel):
    image_ids: List[int]


class HostListingOut(BaseModel):
    id: int
    kind: ListingKind
    title: str
    status: ListingStatus
    price: float
    image: str
    images: List[ImageOut]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        use_enum_values = True


# ==== Auth & users ====

class UserOut(BaseModel):
    id: int
    email: str
    name: str
    avatar_url: Optional[str] = None
    is_host: bool

    class Config:
        from_attributes = True


class SignUpIn(BaseModel):
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(..., min_length=8, max_length=128)
    name: str = Field(..., min_length=1, max_length=200)
    is_host: bool = False


class LoginIn(BaseModel):
    email: str
    password: str


class ProfileUpdateIn(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    avatar_url: Optional[str] = Field(None, max_length=500)
    is_host: Optional[bool] = None


class SessionOut(BaseModel):
    user: UserOut
    token: str


# ==== Favorites ====

class FavoriteOut(BaseModel):
    item_type: ListingKind
    item_id: int
    favorited: bool

    class Config:
        use_enum_values = True


# ==== Reviews ====

class ReviewIn(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=4000)


class ReviewOut(BaseModel):
    id: int
    author_id: int
    author_name: str
    target_type: ListingKind
    target_id: int
    rating: int
    comment: Optional[str] = None
    created_at: datetime

    class Config:
        use_enum_values = True


# ==== Messaging ====

class ConversationIn(BaseModel):
    other_user_id: int
    listing_id: Optional[int] = None
    listing_type: Optional[ListingKind] = None
    title: Optional[str] = Field(None, max_length=200)


class ConversationOut(BaseModel):
    id: int
    user_id_1: int
    user_id_2: int
    listing_id: Optional[int] = None
    listing_type: Optional[str] = None
    title: Optional[str] = None
    status: str
    last_message_at: datetime
    is_new: bool = False

    class Config:
        from_attributes = True


class MessageIn(BaseModel):
    content: str = Field(..., min_length=1, max_length=4000)


class MessageOut(BaseModel):
    id: int
    conversation_id: int
    sender_id: int
    content: str
    created_at: datetime
    is_current_user: bool = False

    class Config:
        from_attributes = True


# ==== Catalog ====

class FeaturedOut(BaseModel):
    stays: List[StayOut]
    food_experiences: List[FoodExperienceOut]
