"""
Plain-dict representations returned by the JSON endpoints.
"""
from .ledger import EnrollmentStatus
from .policy import GradingPolicy


def course_to_dict(course):
    return {
        'id': course.pk,
        'code': course.code,
        'name': course.name,
        'credits': course.credits,
        'course_type': course.course_type,
        'semester': course.semester,
        'regulation': course.regulation,
        'departments': course.departments,
        'instructors': course.instructors,
    }


def enrollment_to_dict(enrollment):
    data = course_to_dict(enrollment.course)
    data.update({
        'enrollment_id': enrollment.pk,
        'source': 'regular',
        'status': enrollment.status,
        'instructor': enrollment.instructor,
        'original_semester': enrollment.original_semester,
        'attempts': enrollment.attempts,
        'cleared_semester': enrollment.cleared_semester,
        'grade_earned': enrollment.grade_earned or None,
        'credit_points': enrollment.credit_points,
        'is_backlog': enrollment.status == EnrollmentStatus.BACKLOG,
        'enrolled_at': enrollment.enrolled_at.isoformat() if enrollment.enrolled_at else None,
    })
    return data


def supplementary_to_dict(supplementary, policy=None):
    policy = policy or GradingPolicy.from_settings()
    return {
        'id': policy.supplementary_reference(supplementary.external_id),
        'external_id': supplementary.external_id,
        'source': 'supplementary',
        'title': supplementary.title,
        'description': supplementary.description,
        'thumbnail_url': supplementary.thumbnail_url,
        'video_url': supplementary.video_url,
        'instructor': supplementary.instructor,
        'course_type': policy.supplementary_course_type,
        'credits': supplementary.gpa_credits(policy.supplementary_default_credits),
        'status': supplementary.status,
        'grade_points': supplementary.grade_points,
        'letter_grade': supplementary.letter_grade or None,
        'semester': supplementary.semester,
        'include_in_gpa': supplementary.include_in_gpa,
        'enrolled_at': supplementary.enrolled_at.isoformat() if supplementary.enrolled_at else None,
        'last_accessed_at': supplementary.last_accessed_at.isoformat() if supplementary.last_accessed_at else None,
    }


def grade_record_to_dict(record):
    return {
        'id': record.pk,
        'course_id': record.course_id,
        'course_code': record.course.code,
        'course_name': record.course.name,
        'semester': record.semester,
        'original_semester': record.original_semester,
        'grade_points': record.grade_points,
        'letter_grade': record.letter_grade,
        'credits': record.credits,
        'include_in_gpa': record.include_in_gpa,
        'attempt': record.attempt,
    }


def graded_result_to_dict(result, policy=None):
    """A grading result is either a GradeRecord or a SupplementaryEnrollment."""
    if hasattr(result, 'external_id'):
        return supplementary_to_dict(result, policy)
    return grade_record_to_dict(result)


def student_to_dict(student):
    return {
        'id': student.pk,
        'student_id': student.student_id,
        'name': student.name,
        'email': student.email,
        'department': student.department,
        'program': student.program,
        'admission_year': student.admission_year,
        'semester': student.semester,
        'regulation': student.regulation,
        'status': student.status,
        'gpa': str(student.gpa),
        'cgpa': str(student.cgpa),
    }


def standing_to_dict(standing):
    return {'gpa': str(standing.gpa), 'cgpa': str(standing.cgpa)}
