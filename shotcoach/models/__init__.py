from shotcoach.models.bean import Bean
from shotcoach.models.grinder_configuration import GrinderConfiguration
from shotcoach.models.shot import Shot
from shotcoach.models.shot_recommendation import ShotRecommendation

__all__ = [
    "Bean",
    "GrinderConfiguration",
    "Shot",
    "ShotRecommendation",
]
