from collections import Counter

from src.domain.models import RatingBucket
from src.domain.services.learners import overall_progress
from src.domain.services.review_listing import rating_distribution
from src.infrastructure.repositories.reviews import ReviewQuery


def test_rating_distribution_is_zero_filled_and_ordered() -> None:
    counts = Counter([5, 5, 3, 1])

    assert rating_distribution(dict(counts)) == [
        RatingBucket(1, 1),
        RatingBucket(2, 0),
        RatingBucket(3, 1),
        RatingBucket(4, 0),
        RatingBucket(5, 2),
    ]


def test_rating_distribution_without_reviews() -> None:
    assert [bucket.count for bucket in rating_distribution({})] == [0, 0, 0, 0, 0]


def test_review_query_reports_applied_filters() -> None:
    assert ReviewQuery().applied() == {"isDeleted": False}
    assert ReviewQuery(rating=4, course_id="c1", search="great", include_deleted=True).applied() == {
        "rating": 4,
        "courseId": "c1",
        "search": "great",
    }


def test_overall_progress_handles_courses_without_lessons() -> None:
    assert overall_progress(0, 0) == 0.0
    assert overall_progress(3, 0) == 0.0


def test_overall_progress_is_clamped() -> None:
    assert overall_progress(5, 10) == 50.0
    assert overall_progress(12, 10) == 100.0
    assert overall_progress(1, 3) == 33.33
