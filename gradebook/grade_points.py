"""Letter grade <-> grade point conversion."""

FAIL_LETTER = 'F'


class GradePointTable:
    """
    Bidirectional letter/point mapping.

    Unknown letters are worth 0 points rather than an error, so a typo in a
    grade sheet records a fail instead of silently skipping the course.
    Point-to-letter is for display only and falls back to ``F``.
    """

    def __init__(self, mapping):
        self._points = {self.normalize(letter): int(points) for letter, points in mapping.items()}
        self._letters = {}
        for letter, points in self._points.items():
            self._letters.setdefault(points, letter)

    @staticmethod
    def normalize(letter):
        if letter is None:
            return ''
        return str(letter).strip().upper()

    def __contains__(self, letter):
        return self.normalize(letter) in self._points

    def points_for(self, letter):
        return self._points.get(self.normalize(letter), 0)

    def letter_for(self, points):
        try:
            points = int(points)
        except (TypeError, ValueError):
            return FAIL_LETTER
        if points <= 0:
            return FAIL_LETTER
        return self._letters.get(points, FAIL_LETTER)
