from .listing import ListingStatus, ListingKind
from .user import User
from .stay import Stay, StayImage, StayAvailability
from .food import FoodExperience, FoodExperienceImage, FoodExperienceAvailability
from .favorite import Favorite
from .review import Review
from .conversation import Conversation, Message
