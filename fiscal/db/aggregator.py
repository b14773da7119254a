"""Aggregation contract consumed by the projection engine."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import date
from decimal import Decimal


class IncomeAggregator(ABC):
    """Sums of received income over a date range and a set of accounts.

    Date ranges are inclusive on both ends. Every method returns
    ``Decimal("0")`` for an empty account set instead of raising. Failures
    of the underlying store propagate to the caller unchanged.
    """

    @abstractmethod
    def sum_gross(self, start: date, end: date, account_ids: Sequence[int]) -> Decimal:
        ...

    @abstractmethod
    def sum_tax(self, start: date, end: date, account_ids: Sequence[int]) -> Decimal:
        ...

    @abstractmethod
    def sum_net(self, start: date, end: date, account_ids: Sequence[int]) -> Decimal:
        ...

    @abstractmethod
    def trailing_12_month_revenue(self, account_ids: Sequence[int], as_of: date) -> Decimal:
        """Gross revenue from one year before ``as_of`` through ``as_of``."""
        ...
