import math
from dataclasses import dataclass

COMPLETE_THRESHOLD = 80


def round_half_up(value: float) -> int:
    """Round .5 upwards (built-in round() uses banker's rounding)."""
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class CompletionScore:
    """Derived profile completeness: 0-100 percentage and the complete flag."""
    percentage: int
    is_complete: bool

    @classmethod
    def from_points(cls, points: float) -> "CompletionScore":
        """Round awarded points, clamp to [0, 100] and apply the threshold."""
        percentage = max(0, min(round_half_up(points), 100))
        return cls(percentage=percentage, is_complete=percentage >= COMPLETE_THRESHOLD)
