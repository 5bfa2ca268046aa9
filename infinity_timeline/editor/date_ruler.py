"""
Date ruler shown above the canvas. Marks can be dragged but never move nodes.
"""

import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import List

from infinity_timeline.core.exceptions import InvalidInputError
from infinity_timeline.schemas import editor as editor_schemas

DAYS_PER_MARK = 30
MIN_MARK_GAP = 2.0


@dataclass
class RulerMark:
    date: date
    position: float  # percent of the ruler width


class DateRuler:
    def __init__(self, start: date, end: date):
        if end < start:
            raise InvalidInputError("Ruler end date is before its start date")
        self.start = start
        self.end = end
        self.marks = self._build_marks(start, end)

    @staticmethod
    def _build_marks(start: date, end: date) -> List[RulerMark]:
        total_days = (end - start).days
        count = math.ceil(total_days / DAYS_PER_MARK) + 1
        spread = max(count - 1, 1)
        return [
            RulerMark(start + timedelta(days=index * DAYS_PER_MARK), index / spread * 100)
            for index in range(count)
        ]

    def drag(self, index: int, position: float) -> float:
        """
        Move a mark. The position is clamped to the ruler and kept at least
        MIN_MARK_GAP away from both neighbours.

        Returns:
            float: The position actually applied
        """
        if not 0 <= index < len(self.marks):
            raise InvalidInputError(f"No ruler mark at index {index}")

        constrained = max(0.0, min(100.0, position))
        if index > 0:
            previous = self.marks[index - 1].position
            if constrained <= previous + MIN_MARK_GAP:
                constrained = previous + MIN_MARK_GAP
        if index < len(self.marks) - 1:
            following = self.marks[index + 1].position
            if constrained >= following - MIN_MARK_GAP:
                constrained = following - MIN_MARK_GAP

        self.marks[index].position = constrained
        return constrained

    def positions(self) -> List[float]:
        return [mark.position for mark in self.marks]

    def to_schema(self) -> editor_schemas.DateRuler:
        return editor_schemas.DateRuler(
            start_date=self.start,
            end_date=self.end,
            marks=[
                editor_schemas.DateMark(date=mark.date, position=mark.position)
                for mark in self.marks
            ],
        )
