# FinSight Ledger - Financial statements & consolidation engine for SMB portfolios
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Core statement calculator for FinSight Ledger.

This module derives one company's financial statements from a list of
ledger transactions and a beginning cash balance.

The calculator runs three independent passes, in this order:

1. Profit & Loss
   --------------
   Transactions flagged ``affects_pl`` feed revenue, COGS or operating
   expenses (see classifier.py). Amounts are taken as magnitudes.

2. Cash Flow
   ----------
   Transactions flagged ``affects_cash_flow`` feed the operating,
   investing or financing activity. Revenue adds its magnitude and
   expenses subtract theirs; asset, equity and debt transactions use the
   signed amount. Combinations without an activity are ignored.

3. Balance Sheet
   --------------
   Cash is taken from the Cash Flow ending cash, never recomputed. Asset
   transactions accumulate (signed) into their line, liabilities
   accumulate as magnitudes. Non-cash revenue creates a receivable and
   non-cash expense creates a payable. Equity is the retained earnings,
   i.e. the cumulative net profit (plus any opening retained earnings).

The result is validated (accounting equation, cash consistency) and
returned with its errors; the calculator never raises for well-formed
transactions.

Notes
-----
Every function here is pure. Multi-period logic lives in periods.py and
portfolio consolidation in consolidation.py; both reuse these building
blocks.
"""

import logging
from collections.abc import Iterable, Sequence
from typing import Optional

from .classifier import (
    BalanceSheetLine,
    CashFlowActivity,
    PLBucket,
    classify,
)
from .config import DEFAULT_CONFIG, EngineConfig
from .statements import BalanceSheet, CashFlow, FinancialStatements, ProfitAndLoss
from .transactions import Transaction

logger = logging.getLogger(__name__)

# Lines accumulated on the balance sheet. Cash comes from the cash flow and
# unclassified assets/liabilities are not shown.
_ASSET_LINES = frozenset(
    {
        BalanceSheetLine.ACCOUNTS_RECEIVABLE,
        BalanceSheetLine.INVENTORY,
        BalanceSheetLine.FIXED_ASSETS,
    }
)
_LIABILITY_LINES = frozenset(
    {
        BalanceSheetLine.ACCOUNTS_PAYABLE,
        BalanceSheetLine.SHORT_TERM_DEBT,
        BalanceSheetLine.LONG_TERM_DEBT,
    }
)


def _sorted_by_date(transactions: Iterable[Transaction]) -> list[Transaction]:
    # Stable sort: same-day transactions keep their ledger order.
    return sorted(transactions, key=lambda tx: tx.date)


def calculate_profit_and_loss(transactions: Iterable[Transaction]) -> ProfitAndLoss:
    """Compute the Profit & Loss statement.

    Args:
        transactions: Ledger transactions; only those with ``affects_pl``
            are considered.

    Returns:
        A ProfitAndLoss instance.
    """
    revenue = 0.0
    cogs = 0.0
    operating_expenses = 0.0

    for tx in transactions:
        if not tx.affects_pl:
            continue

        bucket = classify(tx.type, tx.category).pl_bucket
        amount = abs(tx.amount)

        if bucket is PLBucket.REVENUE:
            revenue += amount
        elif bucket is PLBucket.COGS:
            cogs += amount
        elif bucket is PLBucket.OPERATING_EXPENSE:
            operating_expenses += amount

    total_expenses = cogs + operating_expenses
    net_profit = revenue - total_expenses
    profit_margin = (net_profit / revenue) * 100 if revenue > 0 else 0.0

    return ProfitAndLoss(
        revenue=revenue,
        cogs=cogs,
        operating_expenses=operating_expenses,
        total_expenses=total_expenses,
        net_profit=net_profit,
        profit_margin=profit_margin,
    )


def calculate_cash_flow(
    transactions: Iterable[Transaction], beginning_cash: float = 0.0
) -> CashFlow:
    """Compute the Cash Flow statement.

    Args:
        transactions: Ledger transactions; only those with
            ``affects_cash_flow`` are considered.
        beginning_cash: Cash balance at the start of the period.

    Returns:
        A CashFlow instance whose ending cash is
        ``beginning_cash + net_cash_flow``.
    """
    operating = 0.0
    investing = 0.0
    financing = 0.0

    for tx in transactions:
        if not tx.affects_cash_flow:
            continue

        classification = classify(tx.type, tx.category)
        activity = classification.cash_flow_activity
        if activity is None:
            continue

        if classification.pl_bucket is PLBucket.REVENUE:
            operating += abs(tx.amount)
        elif classification.pl_bucket is not None:
            operating -= abs(tx.amount)
        elif activity is CashFlowActivity.OPERATING:
            operating += tx.amount
        elif activity is CashFlowActivity.INVESTING:
            investing += tx.amount
        elif activity is CashFlowActivity.FINANCING:
            financing += tx.amount

    net_cash_flow = operating + investing + financing
    beginning_cash = float(beginning_cash)

    return CashFlow(
        beginning_cash=beginning_cash,
        operating_cash_flow=operating,
        investing_cash_flow=investing,
        financing_cash_flow=financing,
        net_cash_flow=net_cash_flow,
        ending_cash=beginning_cash + net_cash_flow,
    )


def calculate_balance_sheet(
    transactions: Iterable[Transaction],
    cash_flow: CashFlow,
    pl: ProfitAndLoss,
    prior_retained_earnings: float = 0.0,
    tolerance: float = DEFAULT_CONFIG.balance_tolerance,
) -> BalanceSheet:
    """Compute the Balance Sheet.

    Args:
        transactions: Ledger transactions; only those with
            ``affects_balance`` are considered.
        cash_flow: Cash Flow computed for the same period. Its ending cash
            becomes the balance sheet cash.
        pl: Profit & Loss computed over the same transactions. Its net
            profit becomes the retained earnings.
        prior_retained_earnings: Opening retained earnings carried from
            before the first transaction.
        tolerance: Maximum difference accepted by the accounting equation.

    Returns:
        A BalanceSheet instance.
    """
    cash = cash_flow.ending_cash

    lines: dict[BalanceSheetLine, float] = {
        BalanceSheetLine.ACCOUNTS_RECEIVABLE: 0.0,
        BalanceSheetLine.INVENTORY: 0.0,
        BalanceSheetLine.FIXED_ASSETS: 0.0,
        BalanceSheetLine.ACCOUNTS_PAYABLE: 0.0,
        BalanceSheetLine.SHORT_TERM_DEBT: 0.0,
        BalanceSheetLine.LONG_TERM_DEBT: 0.0,
    }

    for tx in transactions:
        if not tx.affects_balance:
            continue

        classification = classify(tx.type, tx.category)
        line = classification.balance_sheet_line

        if line in _ASSET_LINES:
            lines[line] += tx.amount
        elif line in _LIABILITY_LINES:
            lines[line] += abs(tx.amount)
        elif not tx.affects_cash_flow:
            # Accruals: the unsettled side sits in receivables/payables.
            if classification.pl_bucket is PLBucket.REVENUE:
                lines[BalanceSheetLine.ACCOUNTS_RECEIVABLE] += abs(tx.amount)
            elif classification.pl_bucket is not None:
                lines[BalanceSheetLine.ACCOUNTS_PAYABLE] += abs(tx.amount)

    accounts_receivable = lines[BalanceSheetLine.ACCOUNTS_RECEIVABLE]
    inventory = lines[BalanceSheetLine.INVENTORY]
    fixed_assets = lines[BalanceSheetLine.FIXED_ASSETS]
    accounts_payable = lines[BalanceSheetLine.ACCOUNTS_PAYABLE]
    short_term_debt = lines[BalanceSheetLine.SHORT_TERM_DEBT]
    long_term_debt = lines[BalanceSheetLine.LONG_TERM_DEBT]

    total_assets = cash + accounts_receivable + inventory + fixed_assets
    total_liabilities = accounts_payable + short_term_debt + long_term_debt

    retained_earnings = float(prior_retained_earnings) + pl.net_profit
    total_equity = retained_earnings

    balances = abs(total_assets - (total_liabilities + total_equity)) < tolerance

    return BalanceSheet(
        cash=cash,
        accounts_receivable=accounts_receivable,
        inventory=inventory,
        fixed_assets=fixed_assets,
        total_assets=total_assets,
        accounts_payable=accounts_payable,
        short_term_debt=short_term_debt,
        long_term_debt=long_term_debt,
        total_liabilities=total_liabilities,
        retained_earnings=retained_earnings,
        total_equity=total_equity,
        balances=balances,
    )


def validate_statements(
    balance_sheet: BalanceSheet,
    cash_flow: CashFlow,
    tolerance: float = DEFAULT_CONFIG.balance_tolerance,
) -> list[str]:
    """Return the validation errors of a balance sheet / cash flow pair.

    Two independent checks are made:
    - the accounting equation (Assets = Liabilities + Equity),
    - the balance sheet cash equals the cash flow ending cash.
    """
    errors: list[str] = []

    if not balance_sheet.balances:
        errors.append(
            f"Balance sheet does not balance: "
            f"Assets (${balance_sheet.total_assets:.2f}) != "
            f"Liabilities (${balance_sheet.total_liabilities:.2f}) + "
            f"Equity (${balance_sheet.total_equity:.2f}) | "
            f"Difference: ${balance_sheet.difference:.2f}"
        )

    if abs(balance_sheet.cash - cash_flow.ending_cash) >= tolerance:
        errors.append(
            f"Cash mismatch: Balance Sheet (${balance_sheet.cash:.2f}) != "
            f"Cash Flow (${cash_flow.ending_cash:.2f})"
        )

    return errors


def build_financial_statements(
    pl: ProfitAndLoss,
    balance_sheet: BalanceSheet,
    cash_flow: CashFlow,
    tolerance: float = DEFAULT_CONFIG.balance_tolerance,
) -> FinancialStatements:
    """Assemble and validate the three statements."""
    errors = validate_statements(balance_sheet, cash_flow, tolerance)
    return FinancialStatements(
        pl=pl,
        balance_sheet=balance_sheet,
        cash_flow=cash_flow,
        is_valid=not errors,
        errors=tuple(errors),
    )


def calculate_statements(
    transactions: Sequence[Transaction],
    beginning_cash: float = 0.0,
    prior_retained_earnings: float = 0.0,
    config: Optional[EngineConfig] = None,
) -> FinancialStatements:
    """Compute complete financial statements for one company.

    This is the main entry point of the calculator: P&L first, then Cash
    Flow, then the Balance Sheet which depends on both.

    Args:
        transactions: All transactions to include (any order).
        beginning_cash: Cash balance before the first transaction.
        prior_retained_earnings: Opening retained earnings (0 by default,
            in which case equity equals the net profit of the
            transactions).
        config: Engine configuration; defaults to DEFAULT_CONFIG.

    Returns:
        FinancialStatements, with ``is_valid``/``errors`` describing any
        invariant violation. Never raises for well-formed transactions.
    """
    cfg = config or DEFAULT_CONFIG
    ordered = _sorted_by_date(transactions)

    pl = calculate_profit_and_loss(ordered)
    cash_flow = calculate_cash_flow(ordered, beginning_cash)
    balance_sheet = calculate_balance_sheet(
        ordered,
        cash_flow,
        pl,
        prior_retained_earnings=prior_retained_earnings,
        tolerance=cfg.balance_tolerance,
    )

    statements = build_financial_statements(
        pl, balance_sheet, cash_flow, tolerance=cfg.balance_tolerance
    )
    if not statements.is_valid:
        logger.debug(
            "Statements computed from %d transactions are invalid: %s",
            len(ordered),
            "; ".join(statements.errors),
        )
    return statements
