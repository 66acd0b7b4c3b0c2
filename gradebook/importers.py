"""
Grade sheet import/export (Excel or CSV).

An import sheet has one row per course: ``course_code``, ``grade`` and an
optional ``include_in_gpa``. Supplementary courses are listed by their
prefixed reference (e.g. ``NPTEL-<id>``) in the ``course_code`` column.
"""
import io
import logging

import pandas as pd

from academics.models import Course
from core.spreadsheets import clean_value, read_sheet
from . import config

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ['course_code', 'grade']
TRUE_VALUES = ['true', 'yes', '1', 't', 'y']
FALSE_VALUES = ['false', 'no', '0', 'f', 'n']


def parse_flag(val):
    """``include_in_gpa`` cell -> True/False, or None when blank."""
    # A column with blanks is read as float, so 0 and 1 arrive as 0.0 and 1.0
    if isinstance(val, float) and val.is_integer():
        val = int(val)
    val = clean_value(val).lower()
    if val in TRUE_VALUES:
        return True
    if val in FALSE_VALUES:
        return False
    return None


def read_grade_sheet(file):
    return read_sheet(file, REQUIRED_COLUMNS, max_size=config.MAX_FILE_SIZE)


def grade_entries_from_frame(df, policy):
    """
    Turn sheet rows into batch grade entries.

    Returns ``(entries, errors)``; rows with an unknown course code or no
    grade are reported in ``errors`` and left out of ``entries``.
    """
    codes = {
        clean_value(code).upper() for code in df['course_code']
        if clean_value(code) and not policy.is_supplementary_reference(clean_value(code))
    }
    course_ids = dict(Course.objects.filter(code__in=codes).values_list('code', 'pk'))

    entries = []
    errors = []
    for idx, row in df.iterrows():
        row_num = idx + 2  # Excel row number
        code = clean_value(row.get('course_code', ''))
        grade = clean_value(row.get('grade', ''))

        if not code and not grade:
            continue
        if not code or not grade:
            errors.append({'row': row_num, 'course_code': code, 'reason': 'course_code and grade are required'})
            continue

        if policy.is_supplementary_reference(code):
            course_id = code
        else:
            course_id = course_ids.get(code.upper())
            if course_id is None:
                errors.append({'row': row_num, 'course_code': code, 'reason': f"Unknown course code '{code}'"})
                continue

        entries.append({
            'course_id': course_id,
            'grade': grade,
            'include_in_gpa': parse_flag(row.get('include_in_gpa', '')),
        })

    return entries, errors


def export_grade_sheet(student, records, supplementary, policy):
    """Build an .xlsx of a student's grades. Returns a BytesIO positioned at 0."""
    export_data = []
    for record in records:
        export_data.append({
            'Semester': record.semester,
            'Course Code': record.course.code,
            'Course Name': record.course.name,
            'Credits': record.credits,
            'Grade': record.letter_grade,
            'Grade Points': record.grade_points,
            'Attempt': record.attempt,
            'In GPA': 'Yes' if record.include_in_gpa else 'No',
        })
    for item in supplementary:
        if not item.is_graded:
            continue
        export_data.append({
            'Semester': item.semester,
            'Course Code': policy.supplementary_reference(item.external_id),
            'Course Name': item.title,
            'Credits': item.gpa_credits(policy.supplementary_default_credits),
            'Grade': item.letter_grade,
            'Grade Points': item.grade_points,
            'Attempt': 1,
            'In GPA': 'Yes' if item.include_in_gpa and not item.dropped else 'No',
        })

    df = pd.DataFrame(export_data, columns=[
        'Semester', 'Course Code', 'Course Name', 'Credits',
        'Grade', 'Grade Points', 'Attempt', 'In GPA',
    ])
    output = io.BytesIO()

    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        df.to_excel(writer, index=False, sheet_name='Grades')

        summary = pd.DataFrame([
            {'Field': 'Student ID', 'Value': student.student_id},
            {'Field': 'Name', 'Value': student.name},
            {'Field': 'Semester', 'Value': student.semester},
            {'Field': 'GPA', 'Value': str(student.gpa)},
            {'Field': 'CGPA', 'Value': str(student.cgpa)},
        ])
        summary.to_excel(writer, index=False, sheet_name='Summary')

        # Auto-adjust column widths
        worksheet = writer.sheets['Grades']
        for idx, col in enumerate(df.columns):
            max_length = max(
                df[col].astype(str).map(len).max() if len(df) > 0 else 0,
                len(col)
            ) + 2
            worksheet.column_dimensions[chr(65 + idx)].width = min(max_length, 50)

    output.seek(0)
    return output
