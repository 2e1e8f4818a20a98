"""Course routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, status

from app.domain.authorization import STAFF_ROLES
from app.domain.ownership import ResourceKind, ResourceRef
from app.routes.dependencies import get_course_service, require_resource_access, require_roles
from app.schemas.auth import AuthPrincipal
from app.schemas.common import ApiResponse
from app.schemas.course import AddStudentRequest, Course, CreateCourseRequest, UpdateCourseRequest
from app.schemas.error import ErrorResponse, ValidationErrorResponse
from app.services.courses import CourseService

router = APIRouter(prefix="/courses", tags=["Courses"])

_require_staff = require_roles(*STAFF_ROLES)
# Enrolled students may read; only the instructor (or an admin) may modify.
_can_access_course = require_resource_access(ResourceKind.COURSE, "courseId", "instructor_id", "enrolled_ids")
_can_modify_course = require_resource_access(
    ResourceKind.COURSE,
    "courseId",
    "instructor_id",
    roles=STAFF_ROLES,
)

_COURSE_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


@router.post(
    "",
    response_model=ApiResponse[Course],
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ValidationErrorResponse}, 401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def create_course(
    payload: CreateCourseRequest,
    principal: Annotated[AuthPrincipal, Depends(_require_staff)],
    service: Annotated[CourseService, Depends(get_course_service)],
) -> ApiResponse[Course]:
    course = service.create_course(
        principal=principal,
        code=payload.code,
        name=payload.name,
        instructor_id=payload.instructor_id,
    )
    return ApiResponse(message="Course created successfully", data=course)


@router.get("/{courseId}", response_model=ApiResponse[Course], responses=_COURSE_RESPONSES)
async def get_course(
    course_id: Annotated[str, Path(alias="courseId")],
    course: Annotated[ResourceRef, Depends(_can_access_course)],
    service: Annotated[CourseService, Depends(get_course_service)],
) -> ApiResponse[Course]:
    return ApiResponse(message="Course retrieved successfully", data=service.get_course(course_id=course.id))


@router.patch("/{courseId}", response_model=ApiResponse[Course], responses=_COURSE_RESPONSES)
async def update_course(
    course_id: Annotated[str, Path(alias="courseId")],
    payload: UpdateCourseRequest,
    course: Annotated[ResourceRef, Depends(_can_modify_course)],
    service: Annotated[CourseService, Depends(get_course_service)],
) -> ApiResponse[Course]:
    updated = service.update_course(course_id=course.id, code=payload.code, name=payload.name)
    return ApiResponse(message="Course updated successfully", data=updated)


@router.post("/{courseId}/students", response_model=ApiResponse[Course], responses=_COURSE_RESPONSES)
async def add_course_student(
    course_id: Annotated[str, Path(alias="courseId")],
    payload: AddStudentRequest,
    course: Annotated[ResourceRef, Depends(_can_modify_course)],
    service: Annotated[CourseService, Depends(get_course_service)],
) -> ApiResponse[Course]:
    updated = service.add_student(course_id=course.id, student_id=payload.student_id)
    return ApiResponse(message="Student added to course", data=updated)
