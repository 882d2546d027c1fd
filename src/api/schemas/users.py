"""Pydantic schemas for learner profile endpoints."""

from __future__ import annotations

from datetime import datetime

from .common import CamelModel


class ProfileData(CamelModel):
    id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    phone_number: str | None = None
    role: str
    is_email_verified: bool
    created_at: datetime


class ProfileResponse(CamelModel):
    message: str
    data: ProfileData


class CourseSummary(CamelModel):
    id: str
    title: str
    description: str | None = None


class EnrollmentProgress(CamelModel):
    completed_lessons: int
    completed_quizzes: int
    last_accessed: datetime


class EnrolledCourse(CamelModel):
    course: CourseSummary
    enrolled_at: datetime
    progress: EnrollmentProgress | None = None


class EnrolledCoursesResponse(CamelModel):
    message: str = "Enrolled courses fetched successfully"
    data: list[EnrolledCourse]


class ModuleProgress(CamelModel):
    module_id: str
    module_name: str
    completed_lessons: int
    total_lessons: int


class CourseProgressData(CamelModel):
    course_id: str
    completed_lessons: int
    completed_quizzes: int
    overall_progress: float
    last_accessed: datetime
    module_progress: list[ModuleProgress]


class CourseProgressResponse(CamelModel):
    message: str = "Course progress fetched successfully"
    data: CourseProgressData
