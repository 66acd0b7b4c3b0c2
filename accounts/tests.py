from django.contrib.auth import get_user_model
from django.test import TestCase

from core.utils import is_faculty_or_admin, is_records_admin

User = get_user_model()


class UserManagerTests(TestCase):
    """Tests for the custom UserManager."""

    def test_create_user(self):
        user = User.objects.create_user(email='clerk@College.EDU', password='pass12345')
        self.assertEqual(user.email, 'clerk@college.edu')
        self.assertTrue(user.check_password('pass12345'))
        self.assertFalse(user.is_staff)
        self.assertTrue(user.must_change_password)

    def test_email_is_required(self):
        with self.assertRaises(ValueError):
            User.objects.create_user(email='', password='pass12345')

    def test_superuser_flags_enforced(self):
        root = User.objects.create_superuser(email='root@college.edu', password='pass12345')
        self.assertTrue(root.is_staff and root.is_superuser)
        for flag in ('is_staff', 'is_superuser'):
            with self.assertRaises(ValueError):
                User.objects.create_superuser(email=f'{flag}@college.edu', password='pass12345', **{flag: False})

    def test_records_admin_reaches_admin_site(self):
        user = User.objects.create_records_admin(email='registrar@college.edu', password='pass12345')
        self.assertTrue(user.is_records_admin)
        self.assertTrue(user.is_staff)
        self.assertFalse(user.is_faculty)

    def test_faculty_and_student_roles(self):
        faculty = User.objects.create_faculty(email='rao@college.edu', password='pass12345')
        student = User.objects.create_student(email='21cs001@college.edu', password='pass12345')
        self.assertTrue(faculty.is_faculty)
        self.assertFalse(faculty.is_staff)
        self.assertTrue(student.is_student)
        self.assertFalse(student.is_faculty)


class RoleTests(TestCase):
    """Role labels and the role predicates used by the JSON views."""

    def setUp(self):
        self.root = User.objects.create_superuser(email='root@college.edu', password='pass12345')
        self.admin = User.objects.create_records_admin(email='registrar@college.edu', password='pass12345')
        self.faculty = User.objects.create_faculty(email='rao@college.edu', password='pass12345')
        self.student = User.objects.create_student(email='21cs001@college.edu', password='pass12345')
        self.plain = User.objects.create_user(email='guest@college.edu', password='pass12345')

    def test_role_labels(self):
        self.assertEqual(
            [u.role_label for u in (self.root, self.admin, self.faculty, self.student, self.plain)],
            ['Super Admin', 'Admin', 'Staff', 'Student', 'User'],
        )

    def test_str_is_email(self):
        self.assertEqual(str(self.faculty), 'rao@college.edu')

    def test_predicates(self):
        self.assertTrue(is_records_admin(self.root))
        self.assertTrue(is_records_admin(self.admin))
        self.assertFalse(is_records_admin(self.faculty))
        self.assertTrue(is_faculty_or_admin(self.faculty))
        self.assertTrue(is_faculty_or_admin(self.admin))
        self.assertFalse(is_faculty_or_admin(self.student))
