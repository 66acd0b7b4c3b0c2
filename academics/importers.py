"""
Course catalogue upload (.xlsx/.csv).

Every row is validated before anything is written; a sheet with any invalid
row is rejected whole. Valid sheets create or update courses by code.
"""
import logging

from django.db import transaction

from core.exceptions import ValidationError
from core.spreadsheets import clean_value, read_sheet
from .models import Course, Department

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = [
    'course_code', 'course_name', 'credits', 'type', 'semester', 'regulation', 'department', 'instructor',
]
MAX_SEMESTER = 8


def match_department(value):
    """Case-insensitive lookup of a department name; None when unknown."""
    value = clean_value(value).lower()
    for department in Department.values:
        if department.lower() == value:
            return department
    return None


def split_list(value):
    return [part.strip() for part in clean_value(value).split(',') if part.strip()]


def _parse_int(value):
    try:
        return int(float(clean_value(value)))
    except (TypeError, ValueError):
        return None


def read_course_sheet(file):
    return read_sheet(file, REQUIRED_COLUMNS)


def validate_course_row(row, row_num):
    """Return ``(course_fields, errors)`` for one sheet row."""
    errors = []
    for column in REQUIRED_COLUMNS:
        if not clean_value(row.get(column, '')):
            errors.append(f"Row {row_num}: Missing or empty {column}")
    if errors:
        return None, errors

    credits = _parse_int(row.get('credits'))
    if credits is None or credits < 0:
        errors.append(f"Row {row_num}: Credits must be a non-negative number")

    semester = _parse_int(row.get('semester'))
    if semester is None or not 1 <= semester <= MAX_SEMESTER:
        errors.append(f"Row {row_num}: Semester must be between 1 and {MAX_SEMESTER}")

    regulation = _parse_int(row.get('regulation'))
    if regulation is None:
        errors.append(f"Row {row_num}: Invalid regulation")

    course_type = clean_value(row.get('type'))
    if course_type not in Course.CourseType.values:
        errors.append(
            f"Row {row_num}: Invalid type \"{course_type}\". Must be one of: {', '.join(Course.CourseType.values)}"
        )

    departments = []
    for name in split_list(row.get('department')):
        department = match_department(name)
        if department is None:
            errors.append(f"Row {row_num}: Invalid department \"{name}\"")
        else:
            departments.append(department)

    if errors:
        return None, errors

    return {
        'code': clean_value(row.get('course_code')).upper(),
        'name': clean_value(row.get('course_name')),
        'credits': credits,
        'course_type': course_type,
        'semester': semester,
        'regulation': regulation,
        'departments': departments,
        'instructors': split_list(row.get('instructor')),
        'is_active': True,
    }, []


def import_courses(df):
    """
    Create or update courses from a catalogue DataFrame.

    Raises ValidationError listing every row problem when any row is invalid;
    otherwise returns ``[{'code', 'status': 'created' | 'updated'}]``.
    """
    rows = []
    errors = []
    for idx, row in df.iterrows():
        fields, row_errors = validate_course_row(row, idx + 2)
        errors.extend(row_errors)
        if fields is not None:
            rows.append(fields)
    if errors:
        raise ValidationError('Validation errors', errors=errors)

    processed = []
    with transaction.atomic():
        for fields in rows:
            code = fields.pop('code')
            _, created = Course.objects.update_or_create(code=code, defaults=fields)
            processed.append({'code': code, 'status': 'created' if created else 'updated'})

    logger.info(f"Course upload: {len(processed)} course(s) processed")
    return processed
