"""
GPA / CGPA computation.

Both figures are pure functions of a student's graded items. Regular grade
records and graded supplementary enrollments are both reduced to
``GradedItem`` so the arithmetic never needs to know where a grade came from.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import NamedTuple, Optional

TWO_PLACES = Decimal('0.01')
ZERO = Decimal('0.00')


class GradedItem(NamedTuple):
    points: int
    credits: int
    semester: Optional[int]
    include_in_gpa: bool = True
    dropped: bool = False
    source: str = 'regular'

    REGULAR = 'regular'
    SUPPLEMENTARY = 'supplementary'

    @property
    def counts(self):
        return self.include_in_gpa is not False and not self.dropped


class Standing(NamedTuple):
    gpa: Decimal
    cgpa: Decimal


def weighted_average(items):
    """Credit-weighted mean of grade points, rounded to 2 places; 0 when no credits."""
    total_points = 0
    total_credits = 0
    for item in items:
        total_points += item.points * item.credits
        total_credits += item.credits
    if total_credits == 0:
        return ZERO
    return (Decimal(total_points) / Decimal(total_credits)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def semester_gpa(items, semester):
    return weighted_average(
        item for item in items
        if item.counts and item.semester == semester
    )


def cumulative_gpa(items):
    return weighted_average(item for item in items if item.counts)


def compute_standing(items, semester):
    items = [item for item in items if item is not None]
    return Standing(gpa=semester_gpa(items, semester), cgpa=cumulative_gpa(items))
