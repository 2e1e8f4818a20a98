"""In-memory repositories used by the API and tests."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from app.domain.ownership import ResourceKind, ResourceRef
from app.schemas.assignment import AssignmentStatus
from app.schemas.auth import Role
from app.schemas.course_grade import GradeStatus
from app.schemas.enrollment import EnrollmentStatus
from app.schemas.notice import NoticeStatus
from app.schemas.submission import PLAGIARISM_FLAG_THRESHOLD, SubmissionStatus


def _new_id() -> str:
    # 24 hex characters, the identifier format accepted by the ownership resolver.
    return uuid4().hex[:24]


@dataclass(slots=True)
class UserRecord:
    id: str
    first_name: str
    last_name: str
    email: str
    role: Role
    is_active: bool
    created_at: datetime
    department: str | None = None
    updated_at: datetime | None = None


@dataclass(slots=True)
class CourseRecord:
    id: str
    code: str
    name: str
    instructor_id: str
    created_at: datetime
    student_ids: list[str] = field(default_factory=list)
    updated_at: datetime | None = None


@dataclass(slots=True)
class EnrollmentRecord:
    id: str
    student_id: str
    program: str
    status: EnrollmentStatus
    enrolled_at: datetime
    gpa: float | None = None
    cgpa: float | None = None
    completed_at: datetime | None = None
    last_modified_by: str | None = None
    history: list[str] = field(default_factory=list)


@dataclass(slots=True)
class AssignmentRecord:
    id: str
    title: str
    course_id: str
    faculty_id: str
    created_by: str
    status: AssignmentStatus
    is_visible: bool
    created_at: datetime
    last_modified_by: str | None = None
    updated_at: datetime | None = None


@dataclass(slots=True)
class NoticeRecord:
    id: str
    title: str
    author_id: str
    status: NoticeStatus
    created_at: datetime
    pinned: bool = False
    featured: bool = False
    publish_date: datetime | None = None
    last_modified_by: str | None = None


@dataclass(slots=True)
class CourseGradeRecord:
    id: str
    course_id: str
    student_id: str
    final_grade: str
    status: GradeStatus
    created_at: datetime
    submitted_by: str | None = None
    submitted_at: datetime | None = None


@dataclass(slots=True)
class SubmissionRecord:
    id: str
    assignment_id: str
    student_id: str
    status: SubmissionStatus
    submitted_at: datetime
    grade: str | None = None
    numerical_score: float | None = None
    feedback: str | None = None
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    is_late: bool = False
    late_penalty: float = 0.0
    similarity_score: float | None = None
    plagiarism_flagged: bool = False
    plagiarism_report_url: str | None = None
    is_verified: bool = False
    verified_by: str | None = None
    verification_notes: str | None = None
    history: list[str] = field(default_factory=list)


@dataclass(slots=True)
class InMemoryStore:
    """Simple, deterministic persistence layer for the API and tests."""

    users: dict[str, UserRecord] = field(default_factory=dict)
    courses: dict[str, CourseRecord] = field(default_factory=dict)
    enrollments: dict[str, EnrollmentRecord] = field(default_factory=dict)
    assignments: dict[str, AssignmentRecord] = field(default_factory=dict)
    notices: dict[str, NoticeRecord] = field(default_factory=dict)
    course_grades: dict[str, CourseGradeRecord] = field(default_factory=dict)
    submissions: dict[str, SubmissionRecord] = field(default_factory=dict)
    user_write_count: int = 0
    course_write_count: int = 0
    enrollment_write_count: int = 0
    assignment_write_count: int = 0
    notice_write_count: int = 0
    grade_write_count: int = 0
    submission_write_count: int = 0

    # Users

    def create_user(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str,
        role: Role,
        is_active: bool = True,
        department: str | None = None,
    ) -> UserRecord:
        user = UserRecord(
            id=_new_id(),
            first_name=first_name,
            last_name=last_name,
            email=email.lower(),
            role=role,
            is_active=is_active,
            department=department,
            created_at=datetime.now(UTC),
        )
        self.users[user.id] = user
        self.user_write_count += 1
        return user

    def get_user(self, user_id: str) -> UserRecord | None:
        return self.users.get(user_id)

    def email_exists(self, email: str) -> bool:
        normalized = email.lower()
        return any(user.email == normalized for user in self.users.values())

    def set_user_active(self, *, user: UserRecord, is_active: bool) -> None:
        user.is_active = is_active
        user.updated_at = datetime.now(UTC)
        self.user_write_count += 1

    # Courses

    def create_course(self, *, code: str, name: str, instructor_id: str) -> CourseRecord:
        course = CourseRecord(
            id=_new_id(),
            code=code.upper(),
            name=name,
            instructor_id=instructor_id,
            created_at=datetime.now(UTC),
        )
        self.courses[course.id] = course
        self.course_write_count += 1
        return course

    def get_course(self, course_id: str) -> CourseRecord | None:
        return self.courses.get(course_id)

    def update_course(self, *, course: CourseRecord, code: str | None, name: str | None) -> None:
        if code is not None:
            course.code = code.upper()
        if name is not None:
            course.name = name
        course.updated_at = datetime.now(UTC)
        self.course_write_count += 1

    def add_course_student(self, *, course: CourseRecord, student_id: str) -> None:
        if student_id in course.student_ids:
            return
        course.student_ids.append(student_id)
        course.updated_at = datetime.now(UTC)
        self.course_write_count += 1

    # Enrollments

    def create_enrollment(
        self,
        *,
        student_id: str,
        program: str,
        status: EnrollmentStatus = EnrollmentStatus.ACTIVE,
    ) -> EnrollmentRecord:
        enrollment = EnrollmentRecord(
            id=_new_id(),
            student_id=student_id,
            program=program,
            status=status,
            enrolled_at=datetime.now(UTC),
        )
        self.enrollments[enrollment.id] = enrollment
        self.enrollment_write_count += 1
        return enrollment

    def get_enrollment(self, enrollment_id: str) -> EnrollmentRecord | None:
        return self.enrollments.get(enrollment_id)

    def set_enrollment_status(
        self,
        *,
        enrollment: EnrollmentRecord,
        status: EnrollmentStatus,
        modified_by: str,
        note: str,
    ) -> None:
        enrollment.status = status
        if status in (EnrollmentStatus.COMPLETED, EnrollmentStatus.GRADUATED):
            enrollment.completed_at = datetime.now(UTC)
        enrollment.last_modified_by = modified_by
        enrollment.history.append(f"Status changed to {status.value}. {note}")
        self.enrollment_write_count += 1

    def set_enrollment_gpa(
        self,
        *,
        enrollment: EnrollmentRecord,
        gpa: float,
        cgpa: float | None,
        modified_by: str,
    ) -> None:
        enrollment.gpa = gpa
        if cgpa is not None:
            enrollment.cgpa = cgpa
        enrollment.last_modified_by = modified_by
        enrollment.history.append(f"GPA updated to {gpa}")
        self.enrollment_write_count += 1

    # Assignments

    def create_assignment(
        self,
        *,
        title: str,
        course_id: str,
        faculty_id: str,
        created_by: str | None = None,
        status: AssignmentStatus = AssignmentStatus.DRAFT,
    ) -> AssignmentRecord:
        assignment = AssignmentRecord(
            id=_new_id(),
            title=title,
            course_id=course_id,
            faculty_id=faculty_id,
            created_by=created_by or faculty_id,
            status=status,
            is_visible=status is AssignmentStatus.PUBLISHED,
            created_at=datetime.now(UTC),
        )
        self.assignments[assignment.id] = assignment
        self.assignment_write_count += 1
        return assignment

    def get_assignment(self, assignment_id: str) -> AssignmentRecord | None:
        return self.assignments.get(assignment_id)

    def set_assignment_status(
        self,
        *,
        assignment: AssignmentRecord,
        status: AssignmentStatus,
        modified_by: str,
        is_visible: bool | None = None,
    ) -> None:
        assignment.status = status
        if is_visible is not None:
            assignment.is_visible = is_visible
        assignment.last_modified_by = modified_by
        assignment.updated_at = datetime.now(UTC)
        self.assignment_write_count += 1

    def delete_assignment(self, assignment_id: str) -> None:
        self.assignments.pop(assignment_id, None)
        self.assignment_write_count += 1

    # Notices

    def create_notice(
        self,
        *,
        title: str,
        author_id: str,
        status: NoticeStatus = NoticeStatus.DRAFT,
    ) -> NoticeRecord:
        notice = NoticeRecord(
            id=_new_id(),
            title=title,
            author_id=author_id,
            status=status,
            created_at=datetime.now(UTC),
        )
        self.notices[notice.id] = notice
        self.notice_write_count += 1
        return notice

    def get_notice(self, notice_id: str) -> NoticeRecord | None:
        return self.notices.get(notice_id)

    def update_notice(
        self,
        *,
        notice: NoticeRecord,
        modified_by: str,
        status: NoticeStatus | None = None,
        pinned: bool | None = None,
        featured: bool | None = None,
    ) -> None:
        if status is not None:
            notice.status = status
            if status is NoticeStatus.PUBLISHED:
                notice.publish_date = datetime.now(UTC)
        if pinned is not None:
            notice.pinned = pinned
        if featured is not None:
            notice.featured = featured
        notice.last_modified_by = modified_by
        self.notice_write_count += 1

    # Course grades

    def create_course_grade(
        self,
        *,
        course_id: str,
        student_id: str,
        final_grade: str,
        status: GradeStatus = GradeStatus.DRAFT,
    ) -> CourseGradeRecord:
        grade = CourseGradeRecord(
            id=_new_id(),
            course_id=course_id,
            student_id=student_id,
            final_grade=final_grade,
            status=status,
            created_at=datetime.now(UTC),
        )
        self.course_grades[grade.id] = grade
        self.grade_write_count += 1
        return grade

    def get_course_grade(self, grade_id: str) -> CourseGradeRecord | None:
        return self.course_grades.get(grade_id)

    def submit_course_grade(self, *, grade: CourseGradeRecord, submitted_by: str) -> None:
        grade.status = GradeStatus.SUBMITTED
        grade.submitted_by = submitted_by
        grade.submitted_at = datetime.now(UTC)
        self.grade_write_count += 1

    # Submissions

    def create_submission(
        self,
        *,
        assignment_id: str,
        student_id: str,
        status: SubmissionStatus = SubmissionStatus.SUBMITTED,
    ) -> SubmissionRecord:
        submission = SubmissionRecord(
            id=_new_id(),
            assignment_id=assignment_id,
            student_id=student_id,
            status=status,
            submitted_at=datetime.now(UTC),
        )
        self.submissions[submission.id] = submission
        self.submission_write_count += 1
        return submission

    def get_submission(self, submission_id: str) -> SubmissionRecord | None:
        return self.submissions.get(submission_id)

    def grade_submission(
        self,
        *,
        submission: SubmissionRecord,
        numerical_score: float,
        grade: str | None,
        feedback: str | None,
        reviewed_by: str,
    ) -> None:
        submission.numerical_score = numerical_score
        submission.grade = grade
        if feedback is not None:
            submission.feedback = feedback
        submission.status = SubmissionStatus.GRADED
        submission.reviewed_by = reviewed_by
        submission.reviewed_at = datetime.now(UTC)
        submission.history.append(f"Graded with score: {numerical_score}%")
        self.submission_write_count += 1

    def return_submission(self, *, submission: SubmissionRecord, feedback: str | None, returned_by: str) -> None:
        submission.status = SubmissionStatus.RETURNED
        if feedback is not None:
            submission.feedback = feedback
        submission.reviewed_by = returned_by
        submission.reviewed_at = datetime.now(UTC)
        submission.history.append("Returned for revision")
        self.submission_write_count += 1

    def mark_submission_late(self, *, submission: SubmissionRecord, penalty: float, marked_by: str) -> None:
        submission.is_late = True
        submission.late_penalty = penalty
        submission.status = SubmissionStatus.LATE
        submission.history.append(f"Late penalty applied: {penalty}% by {marked_by}")
        self.submission_write_count += 1

    def record_plagiarism_check(
        self,
        *,
        submission: SubmissionRecord,
        similarity_score: float,
        report_url: str | None,
        checked_by: str,
    ) -> None:
        submission.similarity_score = similarity_score
        submission.plagiarism_flagged = similarity_score > PLAGIARISM_FLAG_THRESHOLD
        submission.plagiarism_report_url = report_url
        submission.history.append(f"Plagiarism check completed: {similarity_score}% similarity by {checked_by}")
        self.submission_write_count += 1

    def verify_submission(self, *, submission: SubmissionRecord, verified_by: str, notes: str | None) -> None:
        submission.is_verified = True
        submission.verified_by = verified_by
        submission.verification_notes = notes
        self.submission_write_count += 1

    def delete_submission(self, submission_id: str) -> None:
        self.submissions.pop(submission_id, None)
        self.submission_write_count += 1

    # Access projections

    def get_resource_ref(self, kind: ResourceKind, resource_id: str) -> ResourceRef | None:
        """Project only the fields an access decision needs."""
        return _PROJECTIONS[kind](self, resource_id)

    def _user_ref(self, user_id: str) -> ResourceRef | None:
        user = self.users.get(user_id)
        if user is None:
            return None
        return ResourceRef(id=user.id, kind=ResourceKind.USER, owner_id=user.id)

    def _course_ref(self, course_id: str) -> ResourceRef | None:
        course = self.courses.get(course_id)
        if course is None:
            return None
        return ResourceRef(
            id=course.id,
            kind=ResourceKind.COURSE,
            instructor_id=course.instructor_id,
            enrolled_ids=frozenset(course.student_ids),
        )

    def _enrollment_ref(self, enrollment_id: str) -> ResourceRef | None:
        enrollment = self.enrollments.get(enrollment_id)
        if enrollment is None:
            return None
        return ResourceRef(id=enrollment.id, kind=ResourceKind.ENROLLMENT, owner_id=enrollment.student_id)

    def _assignment_ref(self, assignment_id: str) -> ResourceRef | None:
        assignment = self.assignments.get(assignment_id)
        if assignment is None:
            return None
        return ResourceRef(
            id=assignment.id,
            kind=ResourceKind.ASSIGNMENT,
            owner_id=assignment.created_by,
            instructor_id=assignment.faculty_id,
        )

    def _notice_ref(self, notice_id: str) -> ResourceRef | None:
        notice = self.notices.get(notice_id)
        if notice is None:
            return None
        return ResourceRef(id=notice.id, kind=ResourceKind.NOTICE, owner_id=notice.author_id)

    def _course_grade_ref(self, grade_id: str) -> ResourceRef | None:
        grade = self.course_grades.get(grade_id)
        if grade is None:
            return None
        course = self.courses.get(grade.course_id)
        return ResourceRef(
            id=grade.id,
            kind=ResourceKind.COURSE_GRADE,
            owner_id=grade.student_id,
            instructor_id=course.instructor_id if course else None,
        )

    def _submission_ref(self, submission_id: str) -> ResourceRef | None:
        submission = self.submissions.get(submission_id)
        if submission is None:
            return None
        assignment = self.assignments.get(submission.assignment_id)
        return ResourceRef(
            id=submission.id,
            kind=ResourceKind.SUBMISSION,
            owner_id=submission.student_id,
            instructor_id=assignment.faculty_id if assignment else None,
        )


_PROJECTIONS: dict[ResourceKind, Callable[[InMemoryStore, str], ResourceRef | None]] = {
    ResourceKind.USER: InMemoryStore._user_ref,
    ResourceKind.COURSE: InMemoryStore._course_ref,
    ResourceKind.ENROLLMENT: InMemoryStore._enrollment_ref,
    ResourceKind.ASSIGNMENT: InMemoryStore._assignment_ref,
    ResourceKind.NOTICE: InMemoryStore._notice_ref,
    ResourceKind.COURSE_GRADE: InMemoryStore._course_grade_ref,
    ResourceKind.SUBMISSION: InMemoryStore._submission_ref,
}
