"""Domain services."""

from src.domain.services.eligibility import EligibilityChecker
from src.domain.services.identity import IdentityResolver
from src.domain.services.learners import LearnerService
from src.domain.services.review_listing import ReviewListingService
from src.domain.services.reviews import ReviewService

__all__ = [
    "EligibilityChecker",
    "IdentityResolver",
    "LearnerService",
    "ReviewListingService",
    "ReviewService",
]
