"""Semester advancement: a student moves on once nothing from the semester is still open."""


def should_advance(current_semester, graded_semester, open_enrollments):
    """
    Advance only when grading happened for the student's current semester
    and no enrollment first taken in that semester is still ``enrolled``.
    """
    return current_semester == graded_semester and open_enrollments == 0
