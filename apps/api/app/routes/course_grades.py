"""Course grade routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from app.domain.authorization import STAFF_ROLES
from app.domain.ownership import ResourceKind, ResourceRef
from app.routes.dependencies import get_course_grade_service, require_resource_access, require_roles
from app.schemas.auth import AuthPrincipal
from app.schemas.bulk import BulkOperationResult
from app.schemas.common import ApiResponse
from app.schemas.course_grade import BulkGradeSubmitRequest, CourseGrade
from app.schemas.error import ErrorResponse, ValidationErrorResponse
from app.services.course_grades import CourseGradeService

router = APIRouter(prefix="/course-grades", tags=["Course Grades"])

_require_staff = require_roles(*STAFF_ROLES)
_course_instructor = require_resource_access(
    ResourceKind.COURSE,
    "courseId",
    "instructor_id",
    roles=STAFF_ROLES,
)
# Readable by the graded student and by the course instructor.
_can_read_grade = require_resource_access(
    ResourceKind.COURSE_GRADE,
    "gradeId",
    "owner_id",
    "instructor_id",
    missing_message="Grade not found",
)


@router.post(
    "/course/{courseId}/bulk-submit",
    response_model=ApiResponse[BulkOperationResult],
    responses={
        400: {"model": ValidationErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def bulk_submit_course_grades(
    course_id: Annotated[str, Path(alias="courseId")],
    payload: BulkGradeSubmitRequest,
    principal: Annotated[AuthPrincipal, Depends(_require_staff)],
    course: Annotated[ResourceRef, Depends(_course_instructor)],
    service: Annotated[CourseGradeService, Depends(get_course_grade_service)],
) -> ApiResponse[BulkOperationResult]:
    result = service.bulk_submit(principal=principal, course=course, grade_ids=payload.grade_ids)
    return ApiResponse(message="Bulk grade submission completed", data=result)


@router.get(
    "/{gradeId}",
    response_model=ApiResponse[CourseGrade],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def get_course_grade(
    grade_id: Annotated[str, Path(alias="gradeId")],
    grade: Annotated[ResourceRef, Depends(_can_read_grade)],
    service: Annotated[CourseGradeService, Depends(get_course_grade_service)],
) -> ApiResponse[CourseGrade]:
    return ApiResponse(message="Grade retrieved successfully", data=service.get_grade(grade_id=grade.id))
