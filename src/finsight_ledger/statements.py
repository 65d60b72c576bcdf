# FinSight Ledger - Financial statements & consolidation engine for SMB portfolios
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Statement value objects for FinSight Ledger.

These dataclasses are the output shape of the engine. They are frozen:
every call to the engine builds new instances from the transactions, and
nothing is updated in place afterwards.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ProfitAndLoss:
    """Profit & Loss statement.

    Attributes:
        revenue: Sum of revenue magnitudes.
        cogs: Cost of goods sold (direct and infrastructure costs).
        operating_expenses: All other expenses.
        total_expenses: cogs + operating_expenses.
        net_profit: revenue - total_expenses (may be negative).
        profit_margin: net_profit / revenue * 100, or 0 when revenue is 0.
    """

    revenue: float = 0.0
    cogs: float = 0.0
    operating_expenses: float = 0.0
    total_expenses: float = 0.0
    net_profit: float = 0.0
    profit_margin: float = 0.0


@dataclass(frozen=True)
class CashFlow:
    """Cash Flow statement for one period.

    Attributes:
        beginning_cash: Cash at the start of the period.
        operating_cash_flow: Cash from revenue, expenses and cash adjustments.
        investing_cash_flow: Cash from equipment, inventory and fixed assets.
        financing_cash_flow: Cash from equity and debt/loans.
        net_cash_flow: Sum of the three activities.
        ending_cash: beginning_cash + net_cash_flow.
    """

    beginning_cash: float = 0.0
    operating_cash_flow: float = 0.0
    investing_cash_flow: float = 0.0
    financing_cash_flow: float = 0.0
    net_cash_flow: float = 0.0
    ending_cash: float = 0.0


@dataclass(frozen=True)
class BalanceSheet:
    """Balance Sheet as of the end of a period.

    ``cash`` always mirrors the ending cash of the paired CashFlow.
    Liabilities are accumulated as magnitudes and are never negative.
    ``balances`` records whether Assets == Liabilities + Equity within the
    configured tolerance.
    """

    # Assets
    cash: float = 0.0
    accounts_receivable: float = 0.0
    inventory: float = 0.0
    fixed_assets: float = 0.0
    total_assets: float = 0.0

    # Liabilities
    accounts_payable: float = 0.0
    short_term_debt: float = 0.0
    long_term_debt: float = 0.0
    total_liabilities: float = 0.0

    # Equity
    retained_earnings: float = 0.0
    total_equity: float = 0.0

    balances: bool = True

    @property
    def difference(self) -> float:
        """Assets minus (Liabilities + Equity)."""
        return self.total_assets - (self.total_liabilities + self.total_equity)


@dataclass(frozen=True)
class FinancialStatements:
    """The three statements of one company (or of a consolidated group).

    Attributes:
        pl: Profit & Loss statement.
        balance_sheet: Balance Sheet.
        cash_flow: Cash Flow statement.
        is_valid: True when no validation error was found.
        errors: Ordered validation messages. The numbers are always
            returned in full, even when invalid.
    """

    pl: ProfitAndLoss
    balance_sheet: BalanceSheet
    cash_flow: CashFlow
    is_valid: bool = True
    errors: tuple[str, ...] = ()
