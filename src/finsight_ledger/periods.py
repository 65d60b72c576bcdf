# FinSight Ledger - Financial statements & consolidation engine for SMB portfolios
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period sequencing for FinSight Ledger.

This module turns a company's whole ledger into a chronological series of
statements, one per calendar period (month by default, quarter or year on
request) that contains at least one transaction.

Semantics
---------
For period *i* (ascending order):

- Profit & Loss and Balance Sheet are computed over the cumulative window
  of periods 1..i. They are "as of" figures: a receivable booked in
  January still exists in February unless a later transaction reverses it,
  and retained earnings are cumulative.
- Cash Flow is computed over period *i*'s own transactions only, with a
  beginning cash equal to period *i-1*'s ending cash (or the initial
  beginning cash for the first period). It is a "for the period" figure.
- The balance sheet cash of period *i* is that period's ending cash, so the
  cash invariant between both statements always holds.

Every call recomputes everything from the transactions: no state survives
between calls. The cost is O(periods x transactions), which is fine for
ledgers of thousands of rows per company.

Consumers needing a true per-period P&L (e.g. a monthly revenue chart) can
use ``profit_and_loss_deltas()``.
"""

import logging
from calendar import monthrange
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Optional

from .config import DEFAULT_CONFIG, GRANULARITIES, EngineConfig
from .engine import (
    build_financial_statements,
    calculate_balance_sheet,
    calculate_cash_flow,
    calculate_profit_and_loss,
)
from .statements import FinancialStatements, ProfitAndLoss
from .transactions import Transaction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Period:
    """Represents a reporting period with a human-readable label."""

    start: date
    end: date
    label: str


@dataclass(frozen=True)
class PeriodStatement:
    """Statements of one company at the end of one period.

    Attributes:
        period: First day of the period.
        end: Last day of the period.
        label: Period label ('2025-01', '2025-Q1' or '2025').
        transactions: The period's own transactions (not the cumulative
            window), in date order.
        statements: Cumulative P&L and Balance Sheet, per-period Cash Flow.
    """

    period: date
    end: date
    label: str
    transactions: tuple[Transaction, ...]
    statements: FinancialStatements

    @property
    def beginning_cash(self) -> float:
        return self.statements.cash_flow.beginning_cash

    @property
    def ending_cash(self) -> float:
        return self.statements.cash_flow.ending_cash

    @property
    def ending_retained_earnings(self) -> float:
        return self.statements.balance_sheet.retained_earnings


def _check_granularity(granularity: str) -> str:
    g = str(granularity).strip().lower()
    if g not in GRANULARITIES:
        raise ValueError(
            f"Unknown period granularity: {granularity!r}. "
            f"Expected one of: {', '.join(GRANULARITIES)}."
        )
    return g


def period_start(d: date, granularity: str = "month") -> date:
    """Return the first day of the period containing ``d``.

    Examples:
        2025-02-17, 'month'   -> 2025-02-01
        2025-02-17, 'quarter' -> 2025-01-01
        2025-02-17, 'year'    -> 2025-01-01
    """
    g = _check_granularity(granularity)
    if g == "month":
        return date(d.year, d.month, 1)
    if g == "quarter":
        return date(d.year, ((d.month - 1) // 3) * 3 + 1, 1)
    return date(d.year, 1, 1)


def period_label(d: date, granularity: str = "month") -> str:
    """Return the label of the period containing ``d``."""
    g = _check_granularity(granularity)
    if g == "month":
        return f"{d.year}-{d.month:02d}"
    if g == "quarter":
        return f"{d.year}-Q{(d.month - 1) // 3 + 1}"
    return f"{d.year}"


def period_for(d: date, granularity: str = "month") -> Period:
    """Return the full Period (start, end, label) containing ``d``."""
    start = period_start(d, granularity)
    g = _check_granularity(granularity)
    if g == "month":
        last_month = start.month
    elif g == "quarter":
        last_month = start.month + 2
    else:
        last_month = 12
    end = date(start.year, last_month, monthrange(start.year, last_month)[1])
    return Period(start=start, end=end, label=period_label(d, g))


def group_transactions_by_period(
    transactions: Iterable[Transaction], granularity: str = "month"
) -> dict[date, list[Transaction]]:
    """Group transactions by period start, in ascending period order.

    Transactions are sorted by date first (stable), so each bucket keeps
    date order and, for the same day, ledger order.
    """
    g = _check_granularity(granularity)
    buckets: dict[date, list[Transaction]] = defaultdict(list)
    for tx in sorted(transactions, key=lambda t: t.date):
        buckets[period_start(tx.date, g)].append(tx)
    return {key: buckets[key] for key in sorted(buckets)}


def calculate_periods(
    transactions: Sequence[Transaction],
    granularity: Optional[str] = None,
    beginning_cash: float = 0.0,
    carry_forward_seed: float = 0.0,
    config: Optional[EngineConfig] = None,
) -> list[PeriodStatement]:
    """Compute statements period by period with carry-forward.

    Args:
        transactions: The company's full ledger, in any order.
        granularity: 'month', 'quarter' or 'year'. Defaults to the
            configured default granularity ('month').
        beginning_cash: Cash balance before the first period.
        carry_forward_seed: Retained earnings before the first period.
        config: Engine configuration; defaults to DEFAULT_CONFIG.

    Returns:
        One PeriodStatement per period containing at least one
        transaction, ascending by period start. Empty list for an empty
        ledger.

    Raises:
        ValueError: if the granularity is unknown.
    """
    cfg = config or DEFAULT_CONFIG
    g = _check_granularity(granularity or cfg.default_granularity)

    grouped = group_transactions_by_period(transactions, g)

    results: list[PeriodStatement] = []
    window: list[Transaction] = []
    carry_cash = float(beginning_cash)

    for start, period_txs in grouped.items():
        window.extend(period_txs)
        bounds = period_for(start, g)

        pl = calculate_profit_and_loss(window)
        cash_flow = calculate_cash_flow(period_txs, carry_cash)
        balance_sheet = calculate_balance_sheet(
            window,
            cash_flow,
            pl,
            prior_retained_earnings=carry_forward_seed,
            tolerance=cfg.balance_tolerance,
        )
        statements = build_financial_statements(
            pl, balance_sheet, cash_flow, tolerance=cfg.balance_tolerance
        )

        results.append(
            PeriodStatement(
                period=bounds.start,
                end=bounds.end,
                label=bounds.label,
                transactions=tuple(period_txs),
                statements=statements,
            )
        )
        carry_cash = cash_flow.ending_cash

    logger.debug(
        "Computed %d %s period(s) from %d transactions",
        len(results),
        g,
        len(window),
    )
    return results


def profit_and_loss_deltas(
    periods: Sequence[PeriodStatement],
) -> list[tuple[date, ProfitAndLoss]]:
    """Return the per-period (non-cumulative) P&L of a period sequence.

    Each period's P&L is the difference between its cumulative P&L and the
    previous period's. The profit margin is recomputed from the deltas.
    """
    deltas: list[tuple[date, ProfitAndLoss]] = []
    previous = ProfitAndLoss()

    for item in periods:
        current = item.statements.pl
        revenue = current.revenue - previous.revenue
        cogs = current.cogs - previous.cogs
        operating_expenses = current.operating_expenses - previous.operating_expenses
        total_expenses = cogs + operating_expenses
        net_profit = revenue - total_expenses
        deltas.append(
            (
                item.period,
                ProfitAndLoss(
                    revenue=revenue,
                    cogs=cogs,
                    operating_expenses=operating_expenses,
                    total_expenses=total_expenses,
                    net_profit=net_profit,
                    profit_margin=(net_profit / revenue) * 100 if revenue > 0 else 0.0,
                ),
            )
        )
        previous = current

    return deltas
