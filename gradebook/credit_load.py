"""
Credit-load validation for an enrollment request.

Works on plain objects: requested courses need ``pk``, ``code``, ``credits``
and ``semester``; existing enrollments need ``course`` and ``status``.
Nothing here touches the database, so the whole batch is accepted or
rejected before any row is written.
"""
from dataclasses import dataclass, field

from core.exceptions import ValidationError
from .ledger import EnrollmentStatus

# Statuses that carry no load in the current semester
UNLOADED_STATES = (EnrollmentStatus.BACKLOG, EnrollmentStatus.DROPPED)


@dataclass
class EnrollmentPlan:
    """What an accepted enrollment request will do."""
    current_credits: int
    new_credits: int = 0
    new_courses: list = field(default_factory=list)
    reattempts: list = field(default_factory=list)
    reactivations: list = field(default_factory=list)

    @property
    def total_credits(self):
        return self.current_credits + self.new_credits


def current_semester_credits(existing_enrollments, semester):
    """Credits the student already carries this semester (backlogs and drops excluded)."""
    return sum(
        e.course.credits for e in existing_enrollments
        if e.status not in UNLOADED_STATES and e.course.semester == semester
    )


def plan_enrollment(student_semester, requested_courses, existing_enrollments, policy):
    """
    Validate an enrollment request and return the plan to apply.

    Re-attempted backlog courses are free with respect to the load limit;
    every other course must belong to the student's current semester and
    counts toward ``[policy.min_credits, policy.max_credits]``.
    """
    if not requested_courses:
        raise ValidationError('Please provide course IDs to enroll')

    # Same course listed twice counts once
    unique_courses = list({course.pk: course for course in requested_courses}.values())
    by_course = {e.course.pk: e for e in existing_enrollments}

    already_enrolled = [
        c.pk for c in unique_courses
        if c.pk in by_course and by_course[c.pk].status == EnrollmentStatus.ENROLLED
    ]
    if already_enrolled:
        raise ValidationError('Already enrolled in some courses', already_enrolled=already_enrolled)

    already_completed = [
        c.pk for c in unique_courses
        if c.pk in by_course and by_course[c.pk].status == EnrollmentStatus.COMPLETED
    ]
    if already_completed:
        raise ValidationError('Some courses are already completed', already_completed=already_completed)

    plan = EnrollmentPlan(current_credits=current_semester_credits(existing_enrollments, student_semester))

    for course in unique_courses:
        existing = by_course.get(course.pk)
        if existing is not None and existing.status == EnrollmentStatus.BACKLOG:
            plan.reattempts.append(existing)
            continue

        if course.semester != student_semester:
            raise ValidationError(
                f"Course {course.code} is not for current semester",
                course_id=course.pk,
                course_semester=course.semester,
                student_semester=student_semester,
            )
        plan.new_credits += course.credits
        if existing is not None:
            plan.reactivations.append(existing)
        else:
            plan.new_courses.append(course)

    if not policy.credits_within_band(plan.total_credits):
        raise ValidationError(
            f"Total credits must be between {policy.min_credits} and {policy.max_credits}. "
            f"Current credits: {plan.current_credits}, new credits: {plan.new_credits}, "
            f"total: {plan.total_credits}",
            current_credits=plan.current_credits,
            new_credits=plan.new_credits,
            total_credits=plan.total_credits,
            min_credits=policy.min_credits,
            max_credits=policy.max_credits,
        )

    return plan
