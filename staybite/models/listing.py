from enum import Enum as PyEnum


class ListingStatus(str, PyEnum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class ListingKind(str, PyEnum):
    STAY = "stay"
    FOOD_EXPERIENCE = "food_experience"
