from app.models.user import User, UserSettings
from app.models.plant import PlantGuide
from app.models.seed import Seed, WishlistItem
from app.models.logs import PlantingReminderLog, PipelineRun

__all__ = [
    "User",
    "UserSettings",
    "PlantGuide",
    "Seed",
    "WishlistItem",
    "PlantingReminderLog",
    "PipelineRun",
]
