from dataclasses import dataclass

from . import config
from .grade_points import GradePointTable


@dataclass(frozen=True)
class GradingPolicy:
    """
    The tunable rules of enrollment and grading, fixed for one engine instance.

    Build it from Django settings with ``GradingPolicy.from_settings()``; tests
    construct alternates directly.
    """
    min_credits: int
    max_credits: int
    grade_table: GradePointTable
    supplementary_course_type: str = 'NPTEL'
    supplementary_id_prefix: str = 'NPTEL-'
    supplementary_default_credits: int = 3
    shared_department: str = 'Science & Humanities'

    @classmethod
    def from_settings(cls):
        return cls(
            min_credits=config.MIN_CREDITS,
            max_credits=config.MAX_CREDITS,
            grade_table=GradePointTable(config.GRADE_POINTS),
            supplementary_course_type=config.SUPPLEMENTARY_COURSE_TYPE,
            supplementary_id_prefix=config.SUPPLEMENTARY_ID_PREFIX,
            supplementary_default_credits=config.SUPPLEMENTARY_DEFAULT_CREDITS,
            shared_department=config.SHARED_DEPARTMENT,
        )

    def credits_within_band(self, total):
        return self.min_credits <= total <= self.max_credits

    def is_supplementary_reference(self, course_ref):
        return str(course_ref).startswith(self.supplementary_id_prefix)

    def external_id(self, course_ref):
        """Strip the supplementary prefix from a grading reference."""
        return str(course_ref)[len(self.supplementary_id_prefix):]

    def supplementary_reference(self, external_id):
        return f"{self.supplementary_id_prefix}{external_id}"
