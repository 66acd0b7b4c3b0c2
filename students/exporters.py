"""Student list export to .xlsx."""
import io

import pandas as pd

FULL_COLUMNS = [
    'Student ID', 'Name', 'DOB', 'Contact', 'Email', 'Father Name', 'Mother Name',
    'Parent Contact', 'Address', 'Department', 'Program', 'Admission Year',
    'Semester', 'Regulation', 'Status', 'GPA', 'CGPA',
]
BRIEF_COLUMNS = ['Name', 'Roll No', 'Email', 'Department']


def _full_row(student):
    return {
        'Student ID': student.student_id,
        'Name': student.name,
        'DOB': student.date_of_birth.isoformat() if student.date_of_birth else '',
        'Contact': student.contact,
        'Email': student.email,
        'Father Name': student.father_name,
        'Mother Name': student.mother_name,
        'Parent Contact': student.parent_contact,
        'Address': student.address,
        'Department': student.department,
        'Program': student.program,
        'Admission Year': student.admission_year,
        'Semester': student.semester,
        'Regulation': student.regulation,
        'Status': student.status,
        'GPA': str(student.gpa),
        'CGPA': str(student.cgpa),
    }


def _brief_row(student):
    return {
        'Name': student.name,
        'Roll No': student.student_id,
        'Email': student.email,
        'Department': student.department,
    }


def export_students(students, brief=False):
    """
    Build an .xlsx of ``students``. The brief layout (name, roll number,
    email, department) is used for per-course class lists.
    Returns a BytesIO positioned at 0.
    """
    columns = BRIEF_COLUMNS if brief else FULL_COLUMNS
    row = _brief_row if brief else _full_row
    df = pd.DataFrame([row(s) for s in students], columns=columns)

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        df.to_excel(writer, index=False, sheet_name='Students')
        worksheet = writer.sheets['Students']
        for idx, col in enumerate(df.columns):
            max_length = max(
                df[col].astype(str).map(len).max() if len(df) > 0 else 0,
                len(col)
            ) + 2
            worksheet.column_dimensions[chr(65 + idx)].width = min(max_length, 50)

    output.seek(0)
    return output
