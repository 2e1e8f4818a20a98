"""Route modules."""

from .assignments import router as assignments_router
from .course_grades import router as course_grades_router
from .courses import router as courses_router
from .enrollments import router as enrollments_router
from .notices import router as notices_router
from .submissions import router as submissions_router
from .users import router as users_router

__all__ = [
    "assignments_router",
    "course_grades_router",
    "courses_router",
    "enrollments_router",
    "notices_router",
    "submissions_router",
    "users_router",
]
