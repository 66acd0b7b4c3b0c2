from decimal import Decimal
from types import SimpleNamespace
from unittest import mock

import pandas as pd
from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.db import DatabaseError
from django.test import TestCase, SimpleTestCase, override_settings

from academics.models import Course, Department
from core.exceptions import ForbiddenError, NotFoundError, ValidationError
from staff.models import Staff
from students.models import Student, SupplementaryEnrollment
from students.services import drop_external, enroll_supplementary
from .aggregator import GradedItem, compute_standing, cumulative_gpa, semester_gpa
from .credit_load import current_semester_credits, plan_enrollment
from .grade_points import GradePointTable
from .importers import grade_entries_from_frame, parse_flag
from .ledger import EnrollmentStatus, InvalidTransition, apply_grade, can_transition, drop, reenroll
from .models import Enrollment, GradeRecord
from .policy import GradingPolicy
from .repository import GradebookRepository
from .services import GradebookService
from .tasks import reconcile_semester_advancement, recompute_student_standing


User = get_user_model()

TABLE = {'O': 10, 'A+': 9, 'A': 8, 'B+': 7, 'B': 6, 'C': 5, 'F': 0}


def make_policy(**overrides):
    values = {
        'min_credits': 12,
        'max_credits': 36,
        'grade_table': GradePointTable(TABLE),
    }
    values.update(overrides)
    return GradingPolicy(**values)


# ============ Pure components ============

class GradePointTableTest(SimpleTestCase):
    """Tests for letter <-> point conversion."""

    def setUp(self):
        self.table = GradePointTable(TABLE)

    def test_points_for_known_letters(self):
        self.assertEqual(self.table.points_for('O'), 10)
        self.assertEqual(self.table.points_for('A+'), 9)
        self.assertEqual(self.table.points_for('C'), 5)

    def test_letters_are_normalized(self):
        self.assertEqual(self.table.points_for(' a+ '), 9)
        self.assertIn('b+', self.table)

    def test_unknown_letter_is_worth_zero(self):
        self.assertEqual(self.table.points_for('X'), 0)
        self.assertEqual(self.table.points_for(''), 0)
        self.assertEqual(self.table.points_for(None), 0)

    def test_letter_for_points(self):
        self.assertEqual(self.table.letter_for(10), 'O')
        self.assertEqual(self.table.letter_for(6), 'B')
        self.assertEqual(self.table.letter_for(0), 'F')
        self.assertEqual(self.table.letter_for(3), 'F')


class LedgerTest(SimpleTestCase):
    """Tests for enrollment state transitions."""

    def make_row(self, status=EnrollmentStatus.ENROLLED, attempts=1):
        return SimpleNamespace(
            status=status, attempts=attempts,
            grade_earned='', credit_points=None, cleared_semester=None,
        )

    def test_pass_completes_course(self):
        row = apply_grade(self.make_row(), 'A', 8, 3)
        self.assertEqual(row.status, EnrollmentStatus.COMPLETED)
        self.assertEqual(row.cleared_semester, 3)
        self.assertEqual(row.credit_points, 8)
        self.assertEqual(row.attempts, 1)

    def test_fail_moves_to_backlog(self):
        row = apply_grade(self.make_row(), 'F', 0, 3)
        self.assertEqual(row.status, EnrollmentStatus.BACKLOG)
        self.assertIsNone(row.cleared_semester)

    def test_regrade_counts_an_attempt(self):
        row = apply_grade(self.make_row(status=EnrollmentStatus.COMPLETED), 'F', 0, 3)
        self.assertEqual(row.status, EnrollmentStatus.BACKLOG)
        self.assertEqual(row.attempts, 2)

    def test_reenroll_backlog(self):
        row = reenroll(self.make_row(status=EnrollmentStatus.BACKLOG))
        self.assertEqual(row.status, EnrollmentStatus.ENROLLED)
        self.assertEqual(row.attempts, 2)

    def test_reenroll_requires_backlog(self):
        with self.assertRaises(InvalidTransition):
            reenroll(self.make_row(status=EnrollmentStatus.COMPLETED))

    def test_dropped_cannot_be_graded(self):
        with self.assertRaises(InvalidTransition):
            apply_grade(self.make_row(status=EnrollmentStatus.DROPPED), 'A', 8, 1)

    def test_completed_cannot_be_dropped(self):
        self.assertFalse(can_transition(EnrollmentStatus.COMPLETED, EnrollmentStatus.DROPPED))
        with self.assertRaises(InvalidTransition):
            drop(self.make_row(status=EnrollmentStatus.COMPLETED))

    def test_plain_status_strings(self):
        # Rows read back from the database carry str, not enum members
        self.assertTrue(can_transition('dropped', EnrollmentStatus.ENROLLED))
        row = apply_grade(self.make_row(status='completed'), 'F', 0, 2)
        self.assertEqual(row.status, EnrollmentStatus.BACKLOG)
        self.assertEqual(row.attempts, 2)


class CreditLoadTest(SimpleTestCase):
    """Tests for the credit band check."""

    def setUp(self):
        self.policy = make_policy()

    def course(self, pk, credits=4, semester=2, code=None):
        return SimpleNamespace(pk=pk, credits=credits, semester=semester, code=code or f'C{pk}')

    def test_new_courses_inside_band(self):
        courses = [self.course(1), self.course(2), self.course(3)]
        plan = plan_enrollment(2, courses, [], self.policy)
        self.assertEqual(plan.new_credits, 12)
        self.assertEqual(len(plan.new_courses), 3)

    def test_below_band_is_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            plan_enrollment(2, [self.course(1), self.course(2)], [], self.policy)
        self.assertEqual(ctx.exception.details['total_credits'], 8)
        self.assertIn('Total credits must be between 12 and 36', ctx.exception.message)

    def test_above_band_counts_existing_load(self):
        existing = [
            SimpleNamespace(course=self.course(pk, credits=4), status=EnrollmentStatus.ENROLLED)
            for pk in range(10, 18)
        ]
        self.assertEqual(current_semester_credits(existing, 2), 32)
        with self.assertRaises(ValidationError) as ctx:
            plan_enrollment(2, [self.course(1, credits=5)], existing, self.policy)
        self.assertEqual(ctx.exception.details['total_credits'], 37)

    def test_backlog_reattempt_adds_no_credits(self):
        backlog = SimpleNamespace(course=self.course(9, credits=4, semester=1), status=EnrollmentStatus.BACKLOG)
        courses = [self.course(1), self.course(2), self.course(3)]
        without = plan_enrollment(2, courses, [backlog], self.policy)
        with_backlog = plan_enrollment(2, courses + [backlog.course], [backlog], self.policy)
        self.assertEqual(without.new_credits, with_backlog.new_credits)
        self.assertEqual(with_backlog.reattempts, [backlog])

    def test_wrong_semester_is_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            plan_enrollment(2, [self.course(1, semester=3)], [], self.policy)
        self.assertEqual(ctx.exception.details['course_semester'], 3)

    def test_alternate_policy(self):
        policy = make_policy(min_credits=4, max_credits=8)
        plan = plan_enrollment(2, [self.course(1)], [], policy)
        self.assertEqual(plan.total_credits, 4)


class AggregatorTest(SimpleTestCase):
    """Tests for GPA/CGPA arithmetic."""

    def test_weighted_gpa(self):
        items = [GradedItem(8, 4, 1), GradedItem(6, 3, 1)]
        self.assertEqual(semester_gpa(items, 1), Decimal('7.14'))

    def test_excluded_item_is_ignored_everywhere(self):
        items = [GradedItem(8, 4, 1), GradedItem(0, 3, 1, include_in_gpa=False)]
        standing = compute_standing(items, 1)
        self.assertEqual(standing.gpa, Decimal('8.00'))
        self.assertEqual(standing.cgpa, Decimal('8.00'))

    def test_dropped_supplementary_is_ignored(self):
        items = [
            GradedItem(8, 4, 1),
            GradedItem(10, 3, 1, dropped=True, source=GradedItem.SUPPLEMENTARY),
        ]
        self.assertEqual(cumulative_gpa(items), Decimal('8.00'))

    def test_no_credits_is_zero(self):
        self.assertEqual(semester_gpa([GradedItem(9, 3, 2)], 1), Decimal('0.00'))
        self.assertEqual(cumulative_gpa([]), Decimal('0.00'))

    def test_cgpa_spans_semesters(self):
        items = [GradedItem(10, 4, 1), GradedItem(6, 4, 2)]
        standing = compute_standing(items, 2)
        self.assertEqual(standing.gpa, Decimal('6.00'))
        self.assertEqual(standing.cgpa, Decimal('8.00'))


# ============ Database-backed ============

class RecordsFixtureMixin:
    """Builds staff, students and courses for service tests."""

    def make_staff(self, staff_id='STAFF001'):
        user = User.objects.create_faculty(email=f'{staff_id.lower()}@college.edu', password='pass12345')
        return Staff.objects.create(
            user=user,
            staff_id=staff_id,
            name=f'Staff {staff_id}',
            department=Department.COMPUTER_SCIENCE,
        )

    def make_student(self, staff, student_id='21CS001', semester=1):
        user = User.objects.create_student(email=f'{student_id.lower()}@college.edu', password='pass12345')
        return Student.objects.create(
            user=user,
            student_id=student_id,
            name=f'Student {student_id}',
            department=Department.COMPUTER_SCIENCE,
            program='B.E',
            admission_year=2021,
            semester=semester,
            regulation=2021,
            created_by=staff,
        )

    def make_course(self, code, credits=4, semester=1, course_type=Course.CourseType.CORE,
                    departments=None, instructors=None):
        return Course.objects.create(
            code=code,
            name=f'Course {code}',
            credits=credits,
            semester=semester,
            regulation=2021,
            course_type=course_type,
            departments=departments if departments is not None else [Department.COMPUTER_SCIENCE.value],
            instructors=instructors or [],
        )


class EnrollTest(RecordsFixtureMixin, TestCase):
    """Tests for batch enrollment."""

    def setUp(self):
        self.staff = self.make_staff()
        self.student = self.make_student(self.staff, semester=2)
        self.service = GradebookService()
        self.courses = [self.make_course(f'CS20{i}', semester=2) for i in range(1, 4)]

    def test_enroll_creates_ledger_rows(self):
        enrolled = self.service.enroll(self.student, [c.pk for c in self.courses])
        self.assertEqual(len(enrolled), 3)
        for enrollment in Enrollment.objects.filter(student=self.student):
            self.assertEqual(enrollment.status, EnrollmentStatus.ENROLLED)
            self.assertEqual(enrollment.original_semester, 2)
            self.assertEqual(enrollment.attempts, 1)

    def test_below_band_writes_nothing(self):
        with self.assertRaises(ValidationError):
            self.service.enroll(self.student, [self.courses[0].pk, self.courses[1].pk])
        self.assertFalse(Enrollment.objects.filter(student=self.student).exists())

    def test_above_band_leaves_existing_rows_alone(self):
        self.service.enroll(self.student, [c.pk for c in self.courses])
        extra = [self.make_course(f'CS21{i}', credits=5, semester=2) for i in range(5)]
        with self.assertRaises(ValidationError):
            self.service.enroll(self.student, [c.pk for c in extra])
        self.assertEqual(Enrollment.objects.filter(student=self.student).count(), 3)

    def test_unknown_course_fails_batch(self):
        with self.assertRaises(ValidationError) as ctx:
            self.service.enroll(self.student, [c.pk for c in self.courses] + [99999])
        self.assertEqual(ctx.exception.details['unknown_courses'], [99999])
        self.assertFalse(Enrollment.objects.exists())

    def test_already_enrolled_is_rejected(self):
        self.service.enroll(self.student, [c.pk for c in self.courses])
        with self.assertRaises(ValidationError) as ctx:
            self.service.enroll(self.student, [self.courses[0].pk])
        self.assertEqual(ctx.exception.details['already_enrolled'], [self.courses[0].pk])

    def test_wrong_semester_is_rejected(self):
        later = self.make_course('CS401', semester=4)
        with self.assertRaises(ValidationError):
            self.service.enroll(self.student, [c.pk for c in self.courses] + [later.pk])
        self.assertFalse(Enrollment.objects.exists())

    def test_backlog_reattempt_updates_existing_row(self):
        old = self.make_course('CS101', semester=1)
        backlog = Enrollment.objects.create(
            student=self.student, course=old, original_semester=1,
            status=EnrollmentStatus.BACKLOG, grade_earned='F', credit_points=0,
        )
        self.service.enroll(self.student, [old.pk] + [c.pk for c in self.courses])

        backlog.refresh_from_db()
        self.assertEqual(backlog.status, EnrollmentStatus.ENROLLED)
        self.assertEqual(backlog.attempts, 2)
        self.assertEqual(backlog.original_semester, 1)
        self.assertEqual(Enrollment.objects.filter(student=self.student, course=old).count(), 1)

    def test_instructor_choice(self):
        course = self.make_course('CS204', semester=2, instructors=['Dr. Rao', 'Dr. Iyer'])
        self.service.enroll(
            self.student,
            [c.pk for c in self.courses] + [course.pk],
            instructor_choices={course.pk: 'Dr. Iyer'},
        )
        self.assertEqual(Enrollment.objects.get(course=course).instructor, 'Dr. Iyer')
        self.assertEqual(Enrollment.objects.get(course=self.courses[0]).instructor, '')


class DropTest(RecordsFixtureMixin, TestCase):
    """Tests for dropping supplementary-type courses."""

    def setUp(self):
        self.staff = self.make_staff()
        self.student = self.make_student(self.staff, semester=2)
        self.service = GradebookService()
        self.core = self.make_course('CS201', semester=2)
        self.core2 = self.make_course('CS202', semester=2)
        self.online = self.make_course('NP201', semester=2, credits=4, course_type=Course.CourseType.NPTEL)
        self.service.enroll(self.student, [self.core.pk, self.core2.pk, self.online.pk])

    def test_core_rejected_supplementary_dropped(self):
        result = self.service.drop_courses(self.student, [self.core.pk, self.online.pk])
        self.assertEqual(result.dropped, [self.online.pk])
        self.assertEqual(result.rejected, [self.core.pk])
        self.assertEqual(Enrollment.objects.get(course=self.online).status, EnrollmentStatus.DROPPED)
        self.assertEqual(Enrollment.objects.get(course=self.core).status, EnrollmentStatus.ENROLLED)

    def test_nothing_droppable_raises(self):
        with self.assertRaises(ValidationError) as ctx:
            self.service.drop_courses(self.student, [self.core.pk])
        self.assertEqual(ctx.exception.details['rejected'], [self.core.pk])

    def test_dropped_course_can_be_taken_again(self):
        self.service.drop_courses(self.student, [self.online.pk])
        self.service.enroll(self.student, [self.online.pk])
        enrollment = Enrollment.objects.get(course=self.online)
        self.assertEqual(enrollment.status, EnrollmentStatus.ENROLLED)
        self.assertEqual(enrollment.attempts, 2)


class RecordGradeTest(RecordsFixtureMixin, TestCase):
    """Tests for single grade entry, standing and advancement."""

    def setUp(self):
        self.staff = self.make_staff()
        self.student = self.make_student(self.staff, semester=1)
        self.service = GradebookService()
        self.math = self.make_course('MA101', credits=4)
        self.physics = self.make_course('PH101', credits=3)

    def grade(self, course, letter, semester=1, **kwargs):
        return self.service.record_grade(
            self.staff, self.student.student_id, course.pk, letter, semester, **kwargs
        )

    def test_pass_completes_enrollment(self):
        record = self.grade(self.math, 'A')
        self.assertEqual(record.grade_points, 8)
        self.assertEqual(record.letter_grade, 'A')
        self.assertEqual(record.credits, 4)

        enrollment = Enrollment.objects.get(student=self.student, course=self.math)
        self.assertEqual(enrollment.status, EnrollmentStatus.COMPLETED)
        self.assertEqual(enrollment.cleared_semester, 1)
        self.assertEqual(enrollment.grade_earned, 'A')

    def test_unrecognized_grade_is_fail(self):
        record = self.grade(self.math, 'X')
        self.assertEqual(record.grade_points, 0)
        self.assertEqual(record.letter_grade, 'F')
        enrollment = Enrollment.objects.get(student=self.student, course=self.math)
        self.assertEqual(enrollment.status, EnrollmentStatus.BACKLOG)
        self.assertIsNone(enrollment.cleared_semester)

    def test_letter_comes_from_injected_table(self):
        service = GradebookService(policy=make_policy(grade_table=GradePointTable({'S': 10, 'A': 8, 'F': 0})))
        record = service.record_grade(self.staff, self.student.student_id, self.math.pk, 'S', 1)
        self.assertEqual(record.grade_points, 10)
        self.assertEqual(record.letter_grade, 'S')

        enroll_supplementary(self.student, 'PL9', 'Data Mining')
        online = service.record_grade(self.staff, self.student.student_id, 'NPTEL-PL9', 's', 1)
        self.assertEqual(online.letter_grade, 'S')

    def test_both_enrollment_kinds_share_graded_view(self):
        enrollment = Enrollment.objects.create(student=self.student, course=self.math, original_semester=1)
        online = enroll_supplementary(self.student, 'PL9', 'Data Mining')
        for item in (enrollment, online):
            self.assertIsNone(item.as_graded_item(3))

        self.grade(self.math, 'A', include_in_gpa=False)
        self.service.record_grade(self.staff, self.student.student_id, 'NPTEL-PL9', 'B', 1)
        enrollment.refresh_from_db()
        online.refresh_from_db()

        self.assertEqual(enrollment.gpa_credits(3), 4)
        self.assertEqual(online.gpa_credits(3), 3)
        self.assertEqual(enrollment.as_graded_item(3), GradedItem(8, 4, 1, include_in_gpa=False))
        self.assertEqual(online.as_graded_item(3).points, 6)
        self.assertEqual(online.as_graded_item(3).source, GradedItem.SUPPLEMENTARY)

    def test_gpa_formula(self):
        self.grade(self.math, 'A')
        self.grade(self.physics, 'B')
        self.student.refresh_from_db()
        self.assertEqual(self.student.gpa, Decimal('7.14'))
        self.assertEqual(self.student.cgpa, Decimal('7.14'))

    def test_excluded_grade(self):
        self.grade(self.math, 'A')
        self.grade(self.physics, 'F', include_in_gpa=False)
        self.student.refresh_from_db()
        self.assertEqual(self.student.gpa, Decimal('8.00'))
        self.assertEqual(self.student.cgpa, Decimal('8.00'))

    def test_repeated_grade_is_idempotent_for_standing(self):
        self.grade(self.math, 'A')
        self.grade(self.physics, 'B')
        self.student.refresh_from_db()
        before = (self.student.gpa, self.student.cgpa)

        self.grade(self.math, 'A')
        self.student.refresh_from_db()
        self.assertEqual((self.student.gpa, self.student.cgpa), before)

        record = GradeRecord.objects.get(student=self.student, course=self.math)
        self.assertEqual(record.attempt, 2)
        self.assertEqual(Enrollment.objects.get(student=self.student, course=self.math).attempts, 2)
        self.assertEqual(GradeRecord.objects.filter(student=self.student).count(), 2)

    def test_grading_without_enrollment_creates_one(self):
        self.grade(self.math, 'O', semester=1)
        enrollment = Enrollment.objects.get(student=self.student, course=self.math)
        self.assertEqual(enrollment.original_semester, 1)
        self.assertEqual(Enrollment.objects.filter(student=self.student).count(), 1)

    def test_other_staff_is_forbidden(self):
        other = self.make_staff('STAFF002')
        with self.assertRaises(ForbiddenError):
            self.service.record_grade(other, self.student.student_id, self.math.pk, 'A', 1)
        self.assertFalse(GradeRecord.objects.exists())

    def test_unknown_student_and_course(self):
        with self.assertRaises(NotFoundError):
            self.service.record_grade(self.staff, 'NOPE', self.math.pk, 'A', 1)
        with self.assertRaises(NotFoundError):
            self.grade(SimpleNamespace(pk=99999), 'A')

    def test_invalid_semester(self):
        with self.assertRaises(ValidationError):
            self.grade(self.math, 'A', semester=0)

    def test_dropped_enrollment_cannot_be_graded(self):
        online = self.make_course('NP101', course_type=Course.CourseType.NPTEL)
        Enrollment.objects.create(
            student=self.student, course=online, original_semester=1, status=EnrollmentStatus.DROPPED,
        )
        with self.assertRaises(ValidationError):
            self.grade(online, 'A')

    def test_advancement_waits_for_open_enrollments(self):
        student = self.make_student(self.staff, student_id='21CS003', semester=3)
        first = self.make_course('CS301', semester=3)
        second = self.make_course('CS302', semester=3)
        for course in (first, second):
            Enrollment.objects.create(student=student, course=course, original_semester=3)

        self.service.record_grade(self.staff, student.student_id, first.pk, 'A', 3)
        student.refresh_from_db()
        self.assertEqual(student.semester, 3)

        self.service.record_grade(self.staff, student.student_id, second.pk, 'F', 3)
        student.refresh_from_db()
        self.assertEqual(student.semester, 4)

    def test_grading_other_semester_does_not_advance(self):
        Enrollment.objects.create(student=self.student, course=self.math, original_semester=1)
        self.grade(self.math, 'A', semester=2)
        self.student.refresh_from_db()
        self.assertEqual(self.student.semester, 1)

    def test_advancement_failure_keeps_grade(self):
        with mock.patch.object(GradebookRepository, 'advance_semester', side_effect=DatabaseError('locked')):
            with self.assertLogs('gradebook.services', level='ERROR'):
                self.grade(self.math, 'A')

        self.student.refresh_from_db()
        self.assertEqual(self.student.semester, 1)
        self.assertEqual(self.student.gpa, Decimal('8.00'))
        self.assertTrue(GradeRecord.objects.filter(student=self.student, course=self.math).exists())

    def test_reconcile_repairs_skipped_advancement(self):
        with mock.patch.object(GradebookRepository, 'advance_semester', side_effect=DatabaseError('locked')):
            with self.assertLogs('gradebook.services', level='ERROR'):
                self.grade(self.math, 'A')

        result = reconcile_semester_advancement()
        self.assertEqual(result['advanced'], 1)
        self.student.refresh_from_db()
        self.assertEqual(self.student.semester, 2)

    def test_reconcile_skips_students_without_grades(self):
        Enrollment.objects.create(student=self.student, course=self.math, original_semester=1)
        result = reconcile_semester_advancement()
        self.assertEqual(result['advanced'], 0)
        self.student.refresh_from_db()
        self.assertEqual(self.student.semester, 1)

    @override_settings(GRADEBOOK_GRADE_POINTS={'P': 10, 'F': 0})
    def test_policy_from_settings(self):
        service = GradebookService()
        self.assertEqual(service.policy.grade_table.points_for('P'), 10)
        self.assertEqual(service.policy.grade_table.points_for('A'), 0)

    def test_recompute_task(self):
        self.grade(self.math, 'A')
        Student.objects.filter(pk=self.student.pk).update(gpa=Decimal('0.00'), cgpa=Decimal('0.00'))
        result = recompute_student_standing(self.student.pk, 1)
        self.assertTrue(result['success'])
        self.assertEqual(result['cgpa'], '8.00')


class SupplementaryGradeTest(RecordsFixtureMixin, TestCase):
    """Tests for grading externally sourced courses."""

    def setUp(self):
        self.staff = self.make_staff()
        self.student = self.make_student(self.staff, semester=1)
        self.service = GradebookService()
        self.math = self.make_course('MA101', credits=4)
        self.online = enroll_supplementary(self.student, 'PLabc123', 'Cloud Computing')

    def test_prefixed_reference_grades_supplementary(self):
        result = self.service.record_grade(self.staff, self.student.student_id, 'NPTEL-PLabc123', 'O', 1)
        self.assertIsInstance(result, SupplementaryEnrollment)

        self.online.refresh_from_db()
        self.assertEqual(self.online.grade_points, 10)
        self.assertEqual(self.online.letter_grade, 'O')
        self.assertEqual(self.online.semester, 1)
        self.assertEqual(self.online.graded_by, self.staff)
        self.assertFalse(Enrollment.objects.filter(student=self.student).exists())

    def test_supplementary_uses_default_credits(self):
        self.service.record_grade(self.staff, self.student.student_id, self.math.pk, 'B', 1)
        self.service.record_grade(self.staff, self.student.student_id, 'NPTEL-PLabc123', 'O', 1)
        self.student.refresh_from_db()
        # (4*6 + 3*10) / 7
        self.assertEqual(self.student.gpa, Decimal('7.71'))

    def test_dropped_supplementary_cannot_be_graded(self):
        drop_external(self.student, 'PLabc123')
        with self.assertRaises(NotFoundError):
            self.service.record_grade(self.staff, self.student.student_id, 'NPTEL-PLabc123', 'O', 1)

    def test_regrade_keeps_exclusion_when_flag_omitted(self):
        self.service.record_grades_batch(self.staff, self.student.student_id, 1, [
            {'course_id': self.math.pk, 'grade': 'A', 'include_in_gpa': False},
            {'course_id': 'NPTEL-PLabc123', 'grade': 'A', 'include_in_gpa': False},
        ])
        self.service.record_grade(self.staff, self.student.student_id, self.math.pk, 'O', 1)
        self.service.record_grade(self.staff, self.student.student_id, 'NPTEL-PLabc123', 'O', 1)

        self.online.refresh_from_db()
        self.assertFalse(self.online.include_in_gpa)
        self.assertFalse(GradeRecord.objects.get(course=self.math).include_in_gpa)


class BatchGradeTest(RecordsFixtureMixin, TestCase):
    """Tests for batch grade entry."""

    def setUp(self):
        self.staff = self.make_staff()
        self.student = self.make_student(self.staff, semester=1)
        self.service = GradebookService()
        self.math = self.make_course('MA101', credits=4)
        self.physics = self.make_course('PH101', credits=3)
        for course in (self.math, self.physics):
            Enrollment.objects.create(student=self.student, course=course, original_semester=1)

    def test_batch_records_all_and_advances_once(self):
        result = self.service.record_grades_batch(self.staff, self.student.student_id, 1, [
            {'course_id': self.math.pk, 'grade': 'A'},
            {'course_id': self.physics.pk, 'grade': 'B'},
        ])
        self.assertEqual(len(result.records), 2)
        self.assertEqual(result.rejected, [])
        self.assertEqual(result.standing.gpa, Decimal('7.14'))
        self.assertTrue(result.advanced)
        self.student.refresh_from_db()
        self.assertEqual(self.student.semester, 2)

    def test_invalid_entries_are_rejected(self):
        result = self.service.record_grades_batch(self.staff, self.student.student_id, 1, [
            {'course_id': self.math.pk, 'grade': 'A'},
            {'course_id': 99999, 'grade': 'A'},
            {'course_id': self.math.pk, 'grade': 'B'},
            {'grade': 'A'},
        ])
        self.assertEqual(len(result.records), 1)
        self.assertEqual(len(result.rejected), 3)
        self.assertFalse(result.advanced)
        self.assertEqual(GradeRecord.objects.get(course=self.math).letter_grade, 'A')

    def test_duplicate_spellings_of_one_course(self):
        result = self.service.record_grades_batch(self.staff, self.student.student_id, 1, [
            {'course_id': self.math.pk, 'grade': 'A'},
            {'course_id': f'0{self.math.pk}', 'grade': 'B'},
            {'course_id': str(self.math.pk), 'grade': 'C'},
        ])
        self.assertEqual(len(result.records), 1)
        self.assertEqual([r['reason'] for r in result.rejected], ['Duplicate entry for this course'] * 2)
        self.assertEqual(Enrollment.objects.filter(student=self.student, course=self.math).count(), 1)
        self.assertEqual(GradeRecord.objects.get(course=self.math).letter_grade, 'A')

    def test_no_valid_entries_raises(self):
        with self.assertRaises(ValidationError):
            self.service.record_grades_batch(self.staff, self.student.student_id, 1, [
                {'course_id': 99999, 'grade': 'A'},
            ])
        self.assertFalse(GradeRecord.objects.exists())

    def test_include_in_gpa_applies_per_entry(self):
        self.service.record_grades_batch(self.staff, self.student.student_id, 1, [
            {'course_id': self.math.pk, 'grade': 'A'},
            {'course_id': self.physics.pk, 'grade': 'C', 'include_in_gpa': False},
        ])
        self.student.refresh_from_db()
        self.assertEqual(self.student.gpa, Decimal('8.00'))


class GradeEndpointTest(RecordsFixtureMixin, TestCase):
    """Tests for the staff grading endpoints."""

    def setUp(self):
        self.staff = self.make_staff()
        self.student = self.make_student(self.staff, semester=1)
        self.math = self.make_course('MA101', credits=4)
        self.client.force_login(self.staff.user)

    def test_record_grade(self):
        response = self.client.post('/gradebook/grades/', {
            'student_id': self.student.student_id,
            'course_id': self.math.pk,
            'grade': 'A+',
            'semester': 1,
        }, content_type='application/json')
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertTrue(data['success'])
        self.assertEqual(data['grade']['letter_grade'], 'A+')
        self.assertEqual(data['student']['cgpa'], '9.00')

    def test_record_grade_missing_fields(self):
        response = self.client.post('/gradebook/grades/', {
            'student_id': self.student.student_id,
        }, content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()['success'])

    def test_other_staff_gets_403(self):
        other = self.make_staff('STAFF002')
        self.client.force_login(other.user)
        response = self.client.post('/gradebook/grades/', {
            'student_id': self.student.student_id,
            'course_id': self.math.pk,
            'grade': 'A',
            'semester': 1,
        }, content_type='application/json')
        self.assertEqual(response.status_code, 403)

    def test_student_cannot_grade(self):
        self.client.force_login(self.student.user)
        response = self.client.post('/gradebook/grades/', {}, content_type='application/json')
        self.assertEqual(response.status_code, 403)

    def test_batch_endpoint(self):
        response = self.client.post('/gradebook/grades/batch/', {
            'student_id': self.student.student_id,
            'semester': 1,
            'grades': [
                {'course_id': self.math.pk, 'grade': 'O'},
                {'course_id': 'NPTEL-missing', 'grade': 'O'},
            ],
        }, content_type='application/json')
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertEqual(len(data['grades']), 1)
        self.assertEqual(data['rejected'][0]['course_id'], 'NPTEL-missing')

    def test_gradable_courses(self):
        Enrollment.objects.create(student=self.student, course=self.math, original_semester=1)
        enroll_supplementary(self.student, 'PLxyz', 'Machine Learning')
        response = self.client.get(f'/gradebook/students/{self.student.student_id}/gradable/')
        self.assertEqual(response.status_code, 200)
        ids = [c.get('code') or c['id'] for c in response.json()['courses']]
        self.assertEqual(ids, ['MA101', 'NPTEL-PLxyz'])

    def test_grade_export(self):
        response = self.client.get(f'/gradebook/students/{self.student.student_id}/export/')
        self.assertEqual(response.status_code, 200)
        self.assertIn('attachment', response['Content-Disposition'])


class GradeSheetImportTest(RecordsFixtureMixin, TestCase):
    """Tests for grade sheet parsing and upload."""

    def setUp(self):
        self.staff = self.make_staff()
        self.student = self.make_student(self.staff, semester=1)
        self.math = self.make_course('MA101', credits=4)
        self.physics = self.make_course('PH101', credits=3)
        self.client.force_login(self.staff.user)

    def test_rows_become_entries(self):
        df = pd.DataFrame([
            {'course_code': 'ma101', 'grade': 'A', 'include_in_gpa': 'yes'},
            {'course_code': 'PH101', 'grade': 'B', 'include_in_gpa': None},
            {'course_code': 'XX999', 'grade': 'A', 'include_in_gpa': None},
            {'course_code': 'NPTEL-PL1', 'grade': 'O', 'include_in_gpa': 'no'},
            {'course_code': None, 'grade': None, 'include_in_gpa': None},
        ])
        entries, errors = grade_entries_from_frame(df, make_policy())

        self.assertEqual(entries, [
            {'course_id': self.math.pk, 'grade': 'A', 'include_in_gpa': True},
            {'course_id': self.physics.pk, 'grade': 'B', 'include_in_gpa': None},
            {'course_id': 'NPTEL-PL1', 'grade': 'O', 'include_in_gpa': False},
        ])
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0]['row'], 4)

    def test_csv_upload(self):
        sheet = SimpleUploadedFile(
            'grades.csv',
            b'Course Code,Grade\nMA101,A\nPH101,B\nZZ100,A\n',
            content_type='text/csv',
        )
        response = self.client.post(
            f'/gradebook/students/{self.student.student_id}/import/',
            {'semester': 1, 'file': sheet},
        )
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertEqual(len(data['grades']), 2)
        self.assertEqual(len(data['row_errors']), 1)
        self.assertEqual(data['standing']['gpa'], '7.14')

    def test_blank_flag_cells(self):
        sheet = SimpleUploadedFile(
            'grades.csv',
            b'course_code,grade,include_in_gpa\nMA101,A,0\nPH101,B,\n',
            content_type='text/csv',
        )
        response = self.client.post(
            f'/gradebook/students/{self.student.student_id}/import/',
            {'semester': 1, 'file': sheet},
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['standing']['gpa'], '6.00')
        self.assertFalse(GradeRecord.objects.get(course=self.math).include_in_gpa)
        self.assertTrue(GradeRecord.objects.get(course=self.physics).include_in_gpa)

    def test_numeric_flags(self):
        self.assertTrue(parse_flag(1.0))
        self.assertFalse(parse_flag(0.0))
        self.assertIsNone(parse_flag(float('nan')))
        self.assertIsNone(parse_flag(2.0))

    def test_corrupt_workbook(self):
        sheet = SimpleUploadedFile(
            'grades.xlsx', b'not a zip file at all',
            content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        )
        response = self.client.post(
            f'/gradebook/students/{self.student.student_id}/import/',
            {'semester': 1, 'file': sheet},
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn('Error reading file', response.json()['message'])
        self.assertFalse(GradeRecord.objects.exists())

    def test_wrong_extension(self):
        sheet = SimpleUploadedFile('grades.txt', b'MA101,A', content_type='text/plain')
        response = self.client.post(
            f'/gradebook/students/{self.student.student_id}/import/',
            {'semester': 1, 'file': sheet},
        )
        self.assertEqual(response.status_code, 400)
