# Grade entry views
from .grading import (
    record_grade,
    record_grades_batch,
    gradable_courses,
)

# Grade sheet import/export views
from .import_export import (
    grade_import,
    grade_export,
)
