from io import StringIO

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.test import SimpleTestCase, TestCase

from .models import Course, Department, Regulation

User = get_user_model()


class CourseModelTests(SimpleTestCase):

    def make_course(self, **kwargs):
        values = {
            'code': 'cs101', 'name': 'Intro', 'credits': 4, 'semester': 1, 'regulation': 2021,
            'departments': [Department.COMPUTER_SCIENCE.value], 'instructors': ['Dr. Rao', 'Dr. Iyer'],
        }
        values.update(kwargs)
        return Course(**values)

    def test_resolve_instructor(self):
        course = self.make_course()
        self.assertEqual(course.default_instructor, 'Dr. Rao')
        self.assertEqual(course.resolve_instructor('Dr. Iyer'), 'Dr. Iyer')
        self.assertEqual(course.resolve_instructor('Someone Else'), 'Dr. Rao')
        self.assertEqual(self.make_course(instructors=[]).resolve_instructor(), '')

    def test_visibility(self):
        shared = Department.SCIENCE_HUMANITIES.value
        course = self.make_course()
        self.assertTrue(course.is_visible_to(Department.COMPUTER_SCIENCE.value, shared, 'NPTEL'))
        self.assertFalse(course.is_visible_to(Department.CIVIL.value, shared, 'NPTEL'))
        self.assertTrue(self.make_course(departments=[shared]).is_visible_to(Department.CIVIL.value, shared, 'NPTEL'))
        online = self.make_course(departments=[], course_type=Course.CourseType.NPTEL)
        self.assertTrue(online.is_visible_to(Department.CIVIL.value, shared, 'NPTEL'))


class CatalogueTests(TestCase):

    def setUp(self):
        user = User.objects.create_faculty(email='rao@college.edu', password='pass12345')
        self.client.force_login(user)

    def test_code_is_upper_cased(self):
        course = Course.objects.create(code=' cs101 ', name='Intro', credits=4, semester=1, regulation=2021)
        self.assertEqual(course.code, 'CS101')

    def test_seed_command(self):
        call_command('seed_academics', stdout=StringIO())
        self.assertTrue(Regulation.objects.filter(year=2021).exists())
        self.assertTrue(Course.objects.filter(code='CS101', regulation=2021).exists())

    def test_course_list_filters(self):
        Course.objects.create(code='CS101', name='Intro', credits=4, semester=1, regulation=2021,
                              departments=[Department.COMPUTER_SCIENCE.value])
        Course.objects.create(code='CE101', name='Surveying', credits=3, semester=1, regulation=2021,
                              departments=[Department.CIVIL.value])
        Course.objects.create(code='CS201', name='Data Structures', credits=4, semester=2, regulation=2021,
                              departments=[Department.COMPUTER_SCIENCE.value])

        data = self.client.get('/academics/courses/?semester=1').json()
        self.assertEqual([c['code'] for c in data['data']], ['CE101', 'CS101'])

        data = self.client.get('/academics/courses/', {'department': Department.CIVIL.value}).json()
        self.assertEqual([c['code'] for c in data['data']], ['CE101'])

    def test_regulation_list(self):
        Regulation.objects.create(year=2021, name='R2021')
        Regulation.objects.create(year=2017, name='R2017', is_active=False)
        data = self.client.get('/academics/regulations/').json()
        self.assertEqual([r['year'] for r in data['data']], [2021])

    def test_instructor_list(self):
        Course.objects.create(code='CS101', name='Intro', credits=4, semester=1, regulation=2021,
                              instructors=['Dr. Rao', 'Dr. Iyer'])
        Course.objects.create(code='CS102', name='Logic', credits=3, semester=1, regulation=2021,
                              instructors=['Dr. Rao'])
        Course.objects.create(code='CS103', name='Lab', credits=2, semester=1, regulation=2021)
        data = self.client.get('/academics/instructors/').json()
        self.assertEqual(data['data'], ['Dr. Iyer', 'Dr. Rao'])


class CourseUploadTests(TestCase):

    HEADER = 'Course Code,Course Name,Credits,Type,Semester,Regulation,Department,Instructor\n'

    def setUp(self):
        admin = User.objects.create_records_admin(email='registrar@college.edu', password='pass12345')
        self.client.force_login(admin)

    def upload(self, body):
        sheet = SimpleUploadedFile('courses.csv', (self.HEADER + body).encode(), content_type='text/csv')
        return self.client.post('/academics/courses/upload/', {'file': sheet})

    def test_creates_and_updates(self):
        Course.objects.create(code='CS101', name='Old Name', credits=3, semester=1, regulation=2021)
        response = self.upload(
            'cs101,Programming,4,Core,1,2021,computer science engineering,Dr. Rao\n'
            'MA101,Calculus,4,Core,1,2021,"Science & Humanities, Civil Engineering","Dr. Iyer, Dr. Das"\n'
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data'], [
            {'code': 'CS101', 'status': 'updated'},
            {'code': 'MA101', 'status': 'created'},
        ])
        updated = Course.objects.get(code='CS101')
        self.assertEqual((updated.name, updated.credits), ('Programming', 4))
        self.assertEqual(updated.departments, [Department.COMPUTER_SCIENCE.value])
        created = Course.objects.get(code='MA101')
        self.assertEqual(created.departments, [Department.SCIENCE_HUMANITIES.value, Department.CIVIL.value])
        self.assertEqual(created.instructors, ['Dr. Iyer', 'Dr. Das'])

    def test_any_invalid_row_rejects_sheet(self):
        response = self.upload(
            'CS101,Programming,4,Core,1,2021,Computer Science Engineering,Dr. Rao\n'
            'CS102,Logic,4,Seminar,9,2021,Astronomy,Dr. Rao\n'
        )
        self.assertEqual(response.status_code, 400)
        errors = response.json()['errors']
        self.assertEqual(len(errors), 3)
        self.assertTrue(all(e.startswith('Row 3:') for e in errors))
        self.assertFalse(Course.objects.exists())

    def test_faculty_cannot_upload(self):
        faculty = User.objects.create_faculty(email='rao@college.edu', password='pass12345')
        self.client.force_login(faculty)
        self.assertEqual(self.upload('CS101,Programming,4,Core,1,2021,Civil Engineering,Dr. Rao\n').status_code, 403)
