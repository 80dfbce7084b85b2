"""Budget ceiling and the gate applied before new expenses are recorded."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from .exceptions import BudgetExceededError
from .validators import parse_ceiling


class BudgetWarning(str, Enum):
    CURRENTLY_OVER = "currently_over"
    WOULD_EXCEED = "would_exceed"


class BudgetPolicy:
    """Holds an optional spending ceiling.

    ``None`` means no budget is enforced. Setting the ceiling to zero also
    clears it, matching the convention of older exports where ``0`` stood for
    "unlimited".
    """

    def __init__(self, ceiling: Optional[float] = None) -> None:
        self._ceiling: Optional[float] = None
        self.set_ceiling(ceiling)

    @property
    def ceiling(self) -> Optional[float]:
        return self._ceiling

    @property
    def is_set(self) -> bool:
        return self._ceiling is not None

    def set_ceiling(self, value: object) -> Optional[float]:
        self._ceiling = parse_ceiling(value)
        return self._ceiling

    def check_before_add(
        self, current_total: float, proposed_amount: float
    ) -> Optional[BudgetWarning]:
        if self._ceiling is None:
            return None
        if current_total >= self._ceiling:
            return BudgetWarning.CURRENTLY_OVER
        if current_total + proposed_amount > self._ceiling:
            return BudgetWarning.WOULD_EXCEED
        return None

    def enforce(self, current_total: float, proposed_amount: float) -> None:
        """Raise :class:`BudgetExceededError` when the add must be refused."""
        warning = self.check_before_add(current_total, proposed_amount)
        if warning is BudgetWarning.CURRENTLY_OVER:
            raise BudgetExceededError(
                warning,
                f"You have reached your budget of {self._ceiling:.2f}; set a new budget first",
            )
        if warning is BudgetWarning.WOULD_EXCEED:
            raise BudgetExceededError(
                warning,
                f"An expense of {proposed_amount:.2f} would exceed your budget of "
                f"{self._ceiling:.2f} (spent {current_total:.2f})",
            )

    def remaining(self, current_total: float) -> Optional[float]:
        if self._ceiling is None:
            return None
        return self._ceiling - current_total
