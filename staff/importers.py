"""
Staff upload (.xlsx/.csv).

The sheet is validated whole before any write. New staff members get a
login whose initial password is the staff ID followed by the date of birth
(YYYYMMDD); existing staff IDs are updated in place.
"""
import logging

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from django.db import transaction

from academics.importers import match_department
from core.exceptions import ValidationError
from core.spreadsheets import clean_value, read_sheet
from students.importers import parse_date
from .models import Staff

logger = logging.getLogger(__name__)

User = get_user_model()

REQUIRED_COLUMNS = ['staff_id', 'staff_name', 'department', 'dob', 'email']


def read_staff_sheet(file):
    return read_sheet(file, REQUIRED_COLUMNS)


def validate_staff_row(row, row_num):
    """Return ``(staff_fields, errors)`` for one sheet row."""
    errors = []
    for column in REQUIRED_COLUMNS:
        if not clean_value(row.get(column, '')):
            errors.append(f"Row {row_num}: Missing or empty {column}")
    if errors:
        return None, errors

    department = match_department(row.get('department'))
    if department is None:
        errors.append(f"Row {row_num}: Invalid department \"{clean_value(row.get('department'))}\"")

    email = clean_value(row.get('email')).lower()
    try:
        validate_email(email)
    except DjangoValidationError:
        errors.append(f"Row {row_num}: Invalid email format")

    dob = parse_date(row.get('dob'))
    if dob is None:
        errors.append(f"Row {row_num}: Invalid date for dob")

    if errors:
        return None, errors

    return {
        'staff_id': clean_value(row.get('staff_id')),
        'name': clean_value(row.get('staff_name')),
        'department': department,
        'date_of_birth': dob,
        'email': email,
        'contact': clean_value(row.get('contact', '')),
    }, []


def initial_password(staff_id, dob):
    return f"{staff_id}{dob.strftime('%Y%m%d')}"


def import_staff(df):
    """
    Create or update staff from a DataFrame.

    Raises ValidationError listing every row problem when any row is invalid;
    otherwise returns ``[{'staff_id', 'status': 'created' | 'updated'}]``.
    """
    rows = []
    errors = []
    for idx, row in df.iterrows():
        fields, row_errors = validate_staff_row(row, idx + 2)
        errors.extend(row_errors)
        if fields is not None:
            rows.append(fields)
    if errors:
        raise ValidationError('Validation errors', errors=errors)

    processed = []
    with transaction.atomic():
        for fields in rows:
            staff_id = fields.pop('staff_id')
            staff = Staff.objects.filter(staff_id=staff_id).first()
            if staff is not None:
                Staff.objects.filter(pk=staff.pk).update(**fields)
                processed.append({'staff_id': staff_id, 'status': 'updated'})
                continue

            user = User.objects.filter(email=fields['email']).first()
            if user is None:
                user = User.objects.create_faculty(
                    email=fields['email'],
                    password=initial_password(staff_id, fields['date_of_birth']),
                )
            elif hasattr(user, 'staff_profile'):
                raise ValidationError(
                    f"{fields['email']} is already linked to staff {user.staff_profile.staff_id}",
                    staff_id=staff_id,
                )
            Staff.objects.create(staff_id=staff_id, user=user, **fields)
            processed.append({'staff_id': staff_id, 'status': 'created'})

    logger.info(f"Staff upload: {len(processed)} staff member(s) processed")
    return processed
