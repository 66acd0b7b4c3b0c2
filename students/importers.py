"""
Roster import: staff upload a sheet of students they are responsible for.

Existing register numbers are updated in place; new ones are created with the
uploading staff member as staff of record and, when an email is given, a
login whose initial password is the register number followed by the date
of birth (YYYYMMDD).
"""
import logging
from datetime import datetime

import pandas as pd
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction

from academics.models import Department
from core.spreadsheets import clean_value, read_sheet
from .models import Student

logger = logging.getLogger(__name__)

User = get_user_model()

REQUIRED_COLUMNS = ['student_id', 'name', 'department', 'program', 'admission_year', 'regulation']
YEAR_RANGE = (2000, 2100)
MAX_SEMESTER = 8


def parse_date(value):
    """Parse date from various formats."""
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    if isinstance(value, datetime):
        return value.date()
    if hasattr(value, 'date'):  # pandas Timestamp
        return value.date()
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        for fmt in ['%Y-%m-%d', '%d/%m/%Y', '%m/%d/%Y', '%d-%m-%Y']:
            try:
                return datetime.strptime(value, fmt).date()
            except ValueError:
                continue
    return None


def _parse_int(value, low, high):
    try:
        number = int(float(clean_value(value)))
    except (TypeError, ValueError):
        return None
    return number if low <= number <= high else None


def validate_row(row, row_num):
    """Return ``(student_fields, errors)`` for one sheet row."""
    errors = []
    student_id = clean_value(row.get('student_id', ''))
    if not student_id:
        return None, [f"Row {row_num}: Missing or empty student_id"]

    name = clean_value(row.get('name', ''))
    if not name:
        errors.append(f"Row {row_num}: Name is required for {student_id}")

    department = clean_value(row.get('department', ''))
    if department not in Department.values:
        errors.append(f"Row {row_num}: Unknown department '{department}' for {student_id}")

    admission_year = _parse_int(row.get('admission_year'), *YEAR_RANGE)
    if admission_year is None:
        errors.append(f"Row {row_num}: Invalid admission year for {student_id}")

    regulation = _parse_int(row.get('regulation'), *YEAR_RANGE)
    if regulation is None:
        errors.append(f"Row {row_num}: Invalid regulation for {student_id}")

    semester = 1
    if clean_value(row.get('semester', '')):
        semester = _parse_int(row.get('semester'), 1, MAX_SEMESTER)
        if semester is None:
            errors.append(f"Row {row_num}: Invalid semester for {student_id}: must be between 1 and {MAX_SEMESTER}")

    if errors:
        return None, errors

    return {
        'student_id': student_id,
        'name': name,
        'date_of_birth': parse_date(row.get('date_of_birth')),
        'email': clean_value(row.get('email', '')).lower(),
        'contact': clean_value(row.get('contact', '')),
        'father_name': clean_value(row.get('father_name', '')),
        'mother_name': clean_value(row.get('mother_name', '')),
        'parent_contact': clean_value(row.get('parent_contact', '')),
        'address': clean_value(row.get('address', '')),
        'department': department,
        'program': clean_value(row.get('program', '')),
        'admission_year': admission_year,
        'semester': semester,
        'regulation': regulation,
    }, []


def read_roster(file):
    return read_sheet(file, REQUIRED_COLUMNS)


def initial_password(fields):
    dob = fields['date_of_birth']
    return f"{fields['student_id']}{dob.strftime('%Y%m%d') if dob else ''}"


def import_roster(df, staff):
    """
    Create or update students from a roster DataFrame.

    Returns ``(processed, errors)`` where each processed item is
    ``{'student_id', 'status': 'created' | 'updated'}``. Rows with errors are
    skipped; a student owned by another staff member is never modified.
    """
    processed = []
    errors = []
    for idx, row in df.iterrows():
        row_num = idx + 2  # Excel row number
        fields, row_errors = validate_row(row, row_num)
        if row_errors:
            errors.extend(row_errors)
            continue

        student_id = fields.pop('student_id')
        existing = Student.objects.filter(student_id=student_id).first()
        if existing is not None and existing.created_by_id != staff.pk:
            errors.append(f"Row {row_num}: {student_id} belongs to another staff member")
            continue

        try:
            with transaction.atomic():
                if existing is not None:
                    # Semester only moves forward through advancement
                    fields.pop('semester')
                    Student.objects.filter(pk=existing.pk).update(**fields)
                    processed.append({'student_id': student_id, 'status': 'updated'})
                    continue

                user = None
                if fields['email']:
                    user = User.objects.create_student(
                        email=fields['email'],
                        password=initial_password(dict(fields, student_id=student_id)),
                    )
                Student.objects.create(student_id=student_id, created_by=staff, user=user, **fields)
                processed.append({'student_id': student_id, 'status': 'created'})
        except IntegrityError as e:
            logger.warning(f"Roster import row {row_num} ({student_id}) failed: {e}")
            errors.append(f"Row {row_num}: Could not save {student_id} (duplicate email?)")

    logger.info(f"Roster import by {staff.staff_id}: {len(processed)} processed, {len(errors)} error(s)")
    return processed, errors

