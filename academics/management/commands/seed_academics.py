"""
Management command to seed academic data: a Regulation and its first-year Courses.

Usage:
    python manage.py seed_academics

    # Seed a different regulation year
    python manage.py seed_academics --regulation=2025

    # Force overwrite existing data
    python manage.py seed_academics --force
"""
from django.core.management.base import BaseCommand
from django.db import transaction

from academics.models import Course, Department, Regulation


class Command(BaseCommand):
    help = 'Seed academic data: a Regulation and its semester 1-2 Courses'

    def add_arguments(self, parser):
        parser.add_argument(
            '--force',
            action='store_true',
            help='Overwrite existing courses of the regulation',
        )
        parser.add_argument(
            '--regulation',
            type=int,
            default=2021,
            help='Regulation year to seed (default 2021)',
        )

    def handle(self, *args, **options):
        year = options['regulation']
        with transaction.atomic():
            regulation = self.create_regulation(year)
            self.create_courses(regulation.year, options['force'])

        self.stdout.write(self.style.SUCCESS('Successfully seeded academic data'))

    def create_regulation(self, year):
        regulation, created = Regulation.objects.get_or_create(
            year=year,
            defaults={'name': f'R{year}', 'description': f'Curriculum regulation {year}'},
        )
        if created:
            self.stdout.write(f'  Created regulation: {regulation}')
        return regulation

    def create_courses(self, year, force):
        """Create common first-year courses."""
        existing = Course.objects.filter(regulation=year)
        if existing.exists() and not force:
            self.stdout.write('Courses already exist. Use --force to overwrite.')
            return

        if force:
            # Courses with enrollments are protected; only deactivate those
            for course in existing:
                if course.enrollments.exists() or course.grade_records.exists():
                    course.is_active = False
                    course.save(update_fields=['is_active'])
                else:
                    course.delete()

        shared = [Department.SCIENCE_HUMANITIES.value]
        engineering = [
            Department.COMPUTER_SCIENCE.value,
            Department.INFORMATION_TECHNOLOGY.value,
            Department.AI_DATA_SCIENCE.value,
        ]

        courses = [
            # Semester 1
            {'code': 'MA101', 'name': 'Engineering Mathematics I', 'credits': 4, 'semester': 1,
             'course_type': Course.CourseType.CORE, 'departments': shared},
            {'code': 'PH101', 'name': 'Engineering Physics', 'credits': 3, 'semester': 1,
             'course_type': Course.CourseType.CORE, 'departments': shared},
            {'code': 'EN101', 'name': 'Communicative English', 'credits': 3, 'semester': 1,
             'course_type': Course.CourseType.CORE, 'departments': shared},
            {'code': 'CS101', 'name': 'Introduction to Computer Science', 'credits': 4, 'semester': 1,
             'course_type': Course.CourseType.CORE, 'departments': engineering},
            {'code': 'CS102', 'name': 'Programming Lab', 'credits': 2, 'semester': 1,
             'course_type': Course.CourseType.LAB, 'departments': engineering},
            {'code': 'NP101', 'name': 'NPTEL Online Course I', 'credits': 3, 'semester': 1,
             'course_type': Course.CourseType.NPTEL, 'departments': []},

            # Semester 2
            {'code': 'MA102', 'name': 'Engineering Mathematics II', 'credits': 4, 'semester': 2,
             'course_type': Course.CourseType.CORE, 'departments': shared},
            {'code': 'CY102', 'name': 'Engineering Chemistry', 'credits': 3, 'semester': 2,
             'course_type': Course.CourseType.CORE, 'departments': shared},
            {'code': 'CS201', 'name': 'Data Structures', 'credits': 4, 'semester': 2,
             'course_type': Course.CourseType.CORE, 'departments': engineering},
            {'code': 'CS202', 'name': 'Data Structures Lab', 'credits': 2, 'semester': 2,
             'course_type': Course.CourseType.LAB, 'departments': engineering},
            {'code': 'CS203', 'name': 'Digital Logic', 'credits': 3, 'semester': 2,
             'course_type': Course.CourseType.ELECTIVE, 'departments': engineering},
        ]

        created = 0
        for course_data in courses:
            _, was_created = Course.objects.update_or_create(
                code=course_data['code'],
                defaults=dict(course_data, regulation=year, instructors=[], is_active=True),
            )
            created += was_created
            self.stdout.write(f'  Seeded course: {course_data["code"]} {course_data["name"]}')

        self.stdout.write(self.style.SUCCESS(f'Created {created} courses for regulation {year}'))
