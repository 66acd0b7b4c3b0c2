from unittest import mock

import requests
from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings

from academics.models import Course, Department
from core.exceptions import NotFoundError, ValidationError
from gradebook.ledger import EnrollmentStatus
from gradebook.models import Enrollment
from staff.models import Staff
from .catalog import CatalogClient, CatalogUnavailable
from .models import Student, SupplementaryEnrollment
from .services import drop_external, enroll_supplementary, touch_external


User = get_user_model()


class StudentFixtureMixin:

    def setUp(self):
        staff_user = User.objects.create_faculty(email='rao@college.edu', password='pass12345')
        self.staff = Staff.objects.create(
            user=staff_user, staff_id='STAFF001', name='Dr. Rao',
            department=Department.COMPUTER_SCIENCE,
        )
        self.user = User.objects.create_student(email='21cs001@college.edu', password='pass12345')
        self.student = Student.objects.create(
            user=self.user,
            student_id='21CS001',
            name='Anitha',
            department=Department.COMPUTER_SCIENCE,
            program='B.E',
            admission_year=2021,
            semester=1,
            regulation=2021,
            created_by=self.staff,
        )

    def make_course(self, code, credits=4, semester=1, departments=None,
                    course_type=Course.CourseType.CORE, regulation=2021):
        return Course.objects.create(
            code=code, name=f'Course {code}', credits=credits, semester=semester,
            regulation=regulation, course_type=course_type,
            departments=departments if departments is not None else [Department.COMPUTER_SCIENCE.value],
        )


class SupplementaryEnrollmentModelTest(StudentFixtureMixin, TestCase):
    """Tests for the SupplementaryEnrollment status view."""

    def test_status_follows_grade(self):
        item = enroll_supplementary(self.student, 'PL1', 'Cloud Computing')
        self.assertEqual(item.status, EnrollmentStatus.ENROLLED)
        self.assertIsNone(item.as_graded_item(3))

        item.grade_points = 0
        self.assertEqual(item.status, EnrollmentStatus.BACKLOG)
        item.grade_points = 9
        self.assertEqual(item.status, EnrollmentStatus.COMPLETED)
        item.dropped = True
        self.assertEqual(item.status, EnrollmentStatus.DROPPED)

    def test_default_credits(self):
        item = enroll_supplementary(self.student, 'PL1', 'Cloud Computing')
        item.grade_points = 8
        item.semester = 1
        self.assertEqual(item.as_graded_item(3).credits, 3)
        item.credits = 2
        self.assertEqual(item.as_graded_item(3).credits, 2)


class SupplementaryServiceTest(StudentFixtureMixin, TestCase):
    """Tests for enrolling in, dropping and opening external courses."""

    def test_enroll_requires_id_and_title(self):
        with self.assertRaises(ValidationError):
            enroll_supplementary(self.student, '', 'Title')
        with self.assertRaises(ValidationError):
            enroll_supplementary(self.student, 'PL1', '')

    def test_duplicate_enroll_rejected(self):
        enroll_supplementary(self.student, 'PL1', 'Cloud Computing')
        with self.assertRaises(ValidationError):
            enroll_supplementary(self.student, 'PL1', 'Cloud Computing')
        self.assertEqual(SupplementaryEnrollment.objects.count(), 1)

    def test_drop_and_drop_again(self):
        enroll_supplementary(self.student, 'PL1', 'Cloud Computing')
        self.assertTrue(drop_external(self.student, 'PL1').dropped)
        with self.assertRaises(ValidationError):
            drop_external(self.student, 'PL1')

    def test_drop_unknown(self):
        with self.assertRaises(NotFoundError):
            drop_external(self.student, 'missing')

    def test_touch_updates_access_time(self):
        item = enroll_supplementary(self.student, 'PL1', 'Cloud Computing')
        before = item.last_accessed_at
        touched = touch_external(self.student, 'PL1')
        self.assertGreaterEqual(touched.last_accessed_at, before)


class CatalogClientTest(TestCase):
    """Tests for the external catalogue search."""

    def test_missing_key(self):
        with self.assertRaises(CatalogUnavailable):
            CatalogClient(api_key='').search('cloud')

    @mock.patch('students.catalog.requests.get')
    def test_results_are_normalized(self, mock_get):
        mock_get.return_value = mock.Mock(status_code=200, json=mock.Mock(return_value={
            'items': [{
                'id': {'playlistId': 'PLabc'},
                'snippet': {
                    'title': 'Cloud Computing',
                    'description': 'IIT course',
                    'channelTitle': 'NPTEL',
                    'publishedAt': '2023-01-01T00:00:00Z',
                    'thumbnails': {'default': {'url': 'https://img/default.jpg'}},
                },
            }],
        }))
        results = CatalogClient(api_key='key').search('cloud', 5)

        self.assertEqual(results[0]['external_id'], 'PLabc')
        self.assertEqual(results[0]['video_url'], 'https://www.youtube.com/playlist?list=PLabc')
        self.assertEqual(results[0]['thumbnail_url'], 'https://img/default.jpg')
        params = mock_get.call_args.kwargs['params']
        self.assertEqual(params['q'], 'cloud NPTEL')
        self.assertEqual(params['maxResults'], 5)

    @mock.patch('students.catalog.requests.get', side_effect=requests.exceptions.Timeout)
    def test_timeout(self, mock_get):
        with self.assertRaises(CatalogUnavailable):
            CatalogClient(api_key='key').search('cloud')

    @mock.patch('students.catalog.requests.get')
    def test_api_error(self, mock_get):
        mock_get.return_value = mock.Mock(status_code=403, json=mock.Mock(return_value={
            'error': {'message': 'quota exceeded'},
        }))
        with self.assertRaises(CatalogUnavailable) as ctx:
            CatalogClient(api_key='key').search('cloud')
        self.assertEqual(ctx.exception.details['error'], 'quota exceeded')


class StudentEndpointTest(StudentFixtureMixin, TestCase):
    """Tests for the student-facing endpoints."""

    def setUp(self):
        super().setUp()
        self.client.force_login(self.user)
        self.courses = [self.make_course(f'CS10{i}') for i in range(1, 4)]

    def test_profile(self):
        response = self.client.get('/students/me/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['student_id'], '21CS001')

    def test_staff_cannot_use_student_endpoints(self):
        self.client.force_login(self.staff.user)
        self.assertEqual(self.client.get('/students/me/').status_code, 403)

    def test_anonymous_gets_401(self):
        self.client.logout()
        self.assertEqual(self.client.get('/students/me/').status_code, 401)

    def test_available_courses_visibility(self):
        self.make_course('MA101', departments=[Department.SCIENCE_HUMANITIES.value])
        self.make_course('NP101', departments=[], course_type=Course.CourseType.NPTEL)
        self.make_course('ME101', departments=[Department.MECHANICAL.value])
        self.make_course('CS201', semester=2)
        self.make_course('CS199', regulation=2017)

        response = self.client.get('/students/courses/available/')
        codes = sorted(c['code'] for c in response.json()['data'])
        self.assertEqual(codes, ['CS101', 'CS102', 'CS103', 'MA101', 'NP101'])

    def test_available_includes_backlogs(self):
        self.student.semester = 2
        self.student.save()
        Enrollment.objects.create(
            student=self.student, course=self.courses[0], original_semester=1,
            status=EnrollmentStatus.BACKLOG, grade_earned='F', credit_points=0,
        )
        response = self.client.get('/students/courses/available/')
        data = response.json()
        self.assertEqual(data['backlog_count'], 1)
        self.assertTrue(data['data'][0]['is_backlog'])

    def test_enroll_and_list(self):
        response = self.client.post('/students/courses/enroll/', {
            'course_ids': [c.pk for c in self.courses],
        }, content_type='application/json')
        self.assertEqual(response.status_code, 201)

        response = self.client.get('/students/courses/enrolled/')
        self.assertEqual(len(response.json()['current']), 3)

    def test_enroll_outside_band(self):
        response = self.client.post('/students/courses/enroll/', {
            'course_ids': [self.courses[0].pk],
        }, content_type='application/json')
        self.assertEqual(response.status_code, 400)
        data = response.json()
        self.assertIn('Total credits must be between', data['message'])
        self.assertEqual(data['total_credits'], 4)

    def test_enroll_rejects_bad_json(self):
        response = self.client.post('/students/courses/enroll/', 'not json', content_type='application/json')
        self.assertEqual(response.status_code, 400)

    def test_drop_endpoint(self):
        online = self.make_course('NP101', departments=[], course_type=Course.CourseType.NPTEL)
        self.client.post('/students/courses/enroll/', {
            'course_ids': [c.pk for c in self.courses] + [online.pk],
        }, content_type='application/json')

        response = self.client.post('/students/courses/drop/', {
            'course_ids': [online.pk, self.courses[0].pk],
        }, content_type='application/json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['dropped'], [online.pk])
        self.assertEqual(response.json()['rejected'], [self.courses[0].pk])

    def test_supplementary_flow(self):
        response = self.client.post('/students/supplementary/enroll/', {
            'external_id': 'PL1', 'title': 'Cloud Computing', 'instructor': 'NPTEL',
        }, content_type='application/json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['data']['id'], 'NPTEL-PL1')

        response = self.client.post('/students/supplementary/PL1/access/')
        self.assertEqual(response.status_code, 200)

        response = self.client.post('/students/supplementary/PL1/drop/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data']['status'], 'dropped')

        response = self.client.get('/students/supplementary/')
        self.assertEqual(response.json()['count'], 1)

    @override_settings(YOUTUBE_API_KEY='')
    def test_catalog_without_key(self):
        response = self.client.get('/students/supplementary/search/?q=cloud')
        self.assertEqual(response.status_code, 502)
        self.assertFalse(response.json()['success'])

    def test_grades(self):
        response = self.client.get('/students/grades/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['cgpa'], '0.00')
