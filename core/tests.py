import json

from django.contrib.auth import get_user_model
from django.http import HttpResponse
from django.test import RequestFactory, SimpleTestCase, TestCase

from academics.models import Department
from staff.models import Staff
from students.models import Student
from .exceptions import ForbiddenError, NotFoundError, ValidationError
from .utils import parse_json_body, records_endpoint

User = get_user_model()


class RecordsErrorTests(SimpleTestCase):

    def test_status_codes(self):
        self.assertEqual(ValidationError('bad').status_code, 400)
        self.assertEqual(NotFoundError('missing').status_code, 404)
        self.assertEqual(ForbiddenError('no').status_code, 403)

    def test_as_dict_carries_details(self):
        error = ValidationError('Some courses do not exist', unknown_courses=[7])
        self.assertEqual(error.as_dict(), {
            'success': False,
            'message': 'Some courses do not exist',
            'unknown_courses': [7],
        })


class ViewHelperTests(SimpleTestCase):

    def setUp(self):
        self.factory = RequestFactory()

    def test_parse_json_body(self):
        request = self.factory.post('/', data=json.dumps({'a': 1}), content_type='application/json')
        self.assertEqual(parse_json_body(request), {'a': 1})

    def test_parse_json_body_rejects_lists(self):
        request = self.factory.post('/', data='[1, 2]', content_type='application/json')
        with self.assertRaises(ValidationError):
            parse_json_body(request)

    def test_records_endpoint_translates_errors(self):
        @records_endpoint
        def view(request):
            raise NotFoundError('Student not found', student_id='X')

        response = view(self.factory.get('/'))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(json.loads(response.content)['student_id'], 'X')

    def test_records_endpoint_passes_through(self):
        @records_endpoint
        def view(request):
            return HttpResponse('ok')

        self.assertEqual(view(self.factory.get('/')).content, b'ok')


class IndexViewTests(TestCase):

    def test_health(self):
        response = self.client.get('/health/')
        self.assertEqual(response.json(), {'status': 'ok'})

    def test_index_for_student(self):
        staff = Staff.objects.create(staff_id='STAFF001', name='Dr. Rao', department=Department.CIVIL)
        user = User.objects.create_student(email='21cv001@college.edu', password='pass12345')
        Student.objects.create(
            user=user, student_id='21CV001', name='Kiran', department=Department.CIVIL,
            program='B.E', admission_year=2021, regulation=2021, created_by=staff,
        )
        self.client.force_login(user)
        data = self.client.get('/').json()
        self.assertEqual(data['role'], 'Student')
        self.assertEqual(data['student_id'], '21CV001')

    def test_index_requires_login(self):
        response = self.client.get('/')
        self.assertEqual(response.status_code, 302)
