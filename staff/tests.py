import io

import pandas as pd
from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase

from academics.models import Course, Department
from gradebook.models import Enrollment
from students.models import Student
from .models import Staff
from .utils import staff_owns_student

User = get_user_model()


class StaffTests(TestCase):

    def setUp(self):
        self.user = User.objects.create_faculty(email='rao@college.edu', password='pass12345')
        self.staff = Staff.objects.create(
            user=self.user, staff_id='STAFF001', name='Dr. Rao', department=Department.COMPUTER_SCIENCE,
        )
        self.other = Staff.objects.create(staff_id='STAFF002', name='Dr. Iyer', department=Department.CIVIL)
        self.mine = self.make_student('21CS001', self.staff, semester=1)
        self.make_student('21CS002', self.staff, semester=3)
        self.theirs = self.make_student('21CV001', self.other, semester=1)
        self.client.force_login(self.user)

    def make_student(self, student_id, owner, semester):
        return Student.objects.create(
            student_id=student_id, name=f'Student {student_id}', department=owner.department,
            program='B.E', admission_year=2021, semester=semester, regulation=2021, created_by=owner,
        )

    def test_ownership(self):
        self.assertTrue(staff_owns_student(self.staff, self.mine))
        self.assertFalse(staff_owns_student(self.staff, self.theirs))
        self.assertFalse(staff_owns_student(None, self.mine))

    def test_profile(self):
        data = self.client.get('/staff/me/').json()
        self.assertEqual(data['data']['staff_id'], 'STAFF001')
        self.assertEqual(data['data']['student_count'], 2)

    def test_roster_only_lists_own_students(self):
        data = self.client.get('/staff/students/').json()
        self.assertEqual([s['student_id'] for s in data['data']], ['21CS001', '21CS002'])

    def test_roster_filters(self):
        data = self.client.get('/staff/students/?semester=3').json()
        self.assertEqual([s['student_id'] for s in data['data']], ['21CS002'])
        data = self.client.get('/staff/students/?search=001').json()
        self.assertEqual([s['student_id'] for s in data['data']], ['21CS001'])

    def test_account_without_profile(self):
        admin = User.objects.create_records_admin(email='admin@college.edu', password='pass12345')
        self.client.force_login(admin)
        self.assertEqual(self.client.get('/staff/me/').status_code, 403)

    def test_roster_import(self):
        sheet = (
            'Student ID,Name,Date of Birth,Email,Department,Program,Admission Year,Semester,Regulation\n'
            '21CS003,New Student,2003-05-17,21cs003@college.edu,Computer Science Engineering,B.E,2021,2,2021\n'
            '21CS001,Renamed,,,Computer Science Engineering,B.E,2021,5,2021\n'
            '21CV001,Taken,,,Civil Engineering,B.E,2021,1,2021\n'
            '21CS004,Bad Dept,,,XYZ,B.E,2021,1,2021\n'
        )
        upload = SimpleUploadedFile('roster.csv', sheet.encode(), content_type='text/csv')
        response = self.client.post('/staff/students/import/', {'file': upload})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['processed'], [
            {'student_id': '21CS003', 'status': 'created'},
            {'student_id': '21CS001', 'status': 'updated'},
        ])
        self.assertEqual(len(data['errors']), 2)

        created = Student.objects.get(student_id='21CS003')
        self.assertEqual(created.created_by, self.staff)
        self.assertEqual(created.semester, 2)
        self.assertTrue(created.user.check_password('21CS00320030517'))

        self.mine.refresh_from_db()
        self.assertEqual(self.mine.name, 'Renamed')
        self.assertEqual(self.mine.semester, 1)
        self.theirs.refresh_from_db()
        self.assertEqual(self.theirs.name, 'Student 21CV001')

    def test_roster_import_missing_columns(self):
        upload = SimpleUploadedFile('roster.csv', b'student_id,name\n21CS009,X\n', content_type='text/csv')
        response = self.client.post('/staff/students/import/', {'file': upload})
        self.assertEqual(response.status_code, 400)
        self.assertIn('department', response.json()['missing_columns'])

    def read_export(self, response):
        self.assertEqual(
            response['Content-Type'], 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
        )
        self.assertTrue(response['Content-Disposition'].startswith('attachment; filename="students_'))
        return pd.read_excel(io.BytesIO(response.content), dtype=str)

    def test_export_own_roster(self):
        df = self.read_export(self.client.get('/staff/students/export/'))
        self.assertEqual(list(df['Student ID']), ['21CS001', '21CS002'])
        self.assertIn('CGPA', df.columns)

        df = self.read_export(self.client.get('/staff/students/export/?semester=3'))
        self.assertEqual(list(df['Student ID']), ['21CS002'])

    def test_admin_exports_everyone(self):
        admin = User.objects.create_records_admin(email='admin@college.edu', password='pass12345')
        self.client.force_login(admin)
        df = self.read_export(self.client.get('/staff/students/export/'))
        self.assertEqual(list(df['Student ID']), ['21CS001', '21CS002', '21CV001'])

    def test_class_list_export(self):
        course = Course.objects.create(code='CS101', name='Intro', credits=4, semester=1, regulation=2021)
        Enrollment.objects.create(student=self.mine, course=course, original_semester=1)
        df = self.read_export(self.client.get(f'/staff/students/export/?course={course.pk}'))
        self.assertEqual(list(df.columns), ['Name', 'Roll No', 'Email', 'Department'])
        self.assertEqual(list(df['Roll No']), ['21CS001'])

        response = self.client.get('/staff/students/export/?course=CS101')
        self.assertEqual(response.status_code, 400)

    def test_staff_upload(self):
        admin = User.objects.create_records_admin(email='admin@college.edu', password='pass12345')
        self.client.force_login(admin)
        sheet = (
            'Staff ID,Staff Name,Department,DOB,Email\n'
            'STAFF003,Dr. Das,civil engineering,1980-02-01,Das@College.edu\n'
            'STAFF002,Dr. Iyer K,Civil Engineering,1975-11-30,iyer@college.edu\n'
        )
        upload = SimpleUploadedFile('staff.csv', sheet.encode(), content_type='text/csv')
        response = self.client.post('/staff/upload/', {'file': upload})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['data'], [
            {'staff_id': 'STAFF003', 'status': 'created'},
            {'staff_id': 'STAFF002', 'status': 'updated'},
        ])

        created = Staff.objects.get(staff_id='STAFF003')
        self.assertEqual(created.department, Department.CIVIL.value)
        self.assertTrue(created.user.is_faculty)
        self.assertTrue(created.user.check_password('STAFF00319800201'))
        self.other.refresh_from_db()
        self.assertEqual(self.other.name, 'Dr. Iyer K')

    def test_staff_upload_rejects_invalid_sheet(self):
        admin = User.objects.create_records_admin(email='admin@college.edu', password='pass12345')
        self.client.force_login(admin)
        sheet = (
            'Staff ID,Staff Name,Department,DOB,Email\n'
            'STAFF003,Dr. Das,Civil Engineering,1980-02-01,das@college.edu\n'
            'STAFF004,Dr. Roy,Astronomy,1980-02-01,not-an-email\n'
        )
        upload = SimpleUploadedFile('staff.csv', sheet.encode(), content_type='text/csv')
        response = self.client.post('/staff/upload/', {'file': upload})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(len(response.json()['errors']), 2)
        self.assertFalse(Staff.objects.filter(staff_id='STAFF003').exists())

    def test_staff_upload_is_admin_only(self):
        upload = SimpleUploadedFile('staff.csv', b'Staff ID\n', content_type='text/csv')
        self.assertEqual(self.client.post('/staff/upload/', {'file': upload}).status_code, 403)
