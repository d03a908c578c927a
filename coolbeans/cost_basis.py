"""Cost basis tracking for brokerage holdings using the average cost method."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class CostBasisTracker:
    total_basis: float = 0.0

    def add_basis(self, amount: float) -> None:
        if amount <= 0:
            return
        self.total_basis += amount

    def sell_shares(self, proceeds: float, shares_sold: int, shares_before: int) -> float:
        """Apply a share sale and return the realized gain (negative for a loss)."""
        if shares_sold <= 0 or shares_before <= 0:
            return 0.0

        per_share = self.total_basis / shares_before
        basis_reduction = per_share * shares_sold
        self.total_basis = max(0.0, self.total_basis - basis_reduction)
        return proceeds - basis_reduction

    def withdraw(self, amount: float, balance_before: float) -> float:
        """Apply a withdrawal from a pooled balance and return the realized gain.

        The gain is the unrealized appreciation prorated by the fraction sold.
        """
        if amount <= 0 or balance_before <= 0:
            return 0.0

        principal = self.total_basis
        fraction = min(1.0, amount / balance_before)
        self.total_basis = max(0.0, principal - principal * fraction)
        return (balance_before - principal) * fraction
