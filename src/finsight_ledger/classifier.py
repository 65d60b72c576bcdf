# FinSight Ledger - Financial statements & consolidation engine for SMB portfolios
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Category classification rules for FinSight Ledger.

Transactions carry a free-form category. This module is the single place
where those categories are interpreted: it maps a (type, category) pair to
a closed set of variants describing where the transaction lands in each of
the three statements.

- PLBucket:          revenue, COGS or operating expense.
- CashFlowActivity:  operating, investing or financing.
- BalanceSheetLine:  the asset or liability line it accumulates into.

Matching rules (category lower-cased, trimmed, spaces treated as '_'):

    expense   'direct_cost' | 'infrastructure' | == 'cogs'  -> COGS
              anything else                                  -> operating expense
    asset     'receivable'                                   -> accounts receivable
              'inventory'                                    -> inventory
              'equipment' | 'fixed' | 'property'             -> fixed assets
              'cash'                                         -> cash (cash flow only)
              anything else                                  -> unclassified
    liability 'payable'                                      -> accounts payable
              'short' + 'debt'                               -> short-term debt
              'long' + 'debt'                                -> long-term debt
              anything else                                  -> unclassified

For the cash flow activity of an asset, 'cash' is checked before
'equipment' | 'inventory' | 'fixed', so 'cash equipment deposit' is an
operating flow even though its balance sheet line is fixed assets.

The engine arithmetic never inspects category strings itself.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class PLBucket(str, Enum):
    """Profit & Loss line fed by a transaction."""

    REVENUE = "revenue"
    COGS = "cogs"
    OPERATING_EXPENSE = "operating_expense"


class CashFlowActivity(str, Enum):
    """Cash flow section fed by a cash transaction."""

    OPERATING = "operating"
    INVESTING = "investing"
    FINANCING = "financing"


class BalanceSheetLine(str, Enum):
    """Balance sheet line fed by an asset or liability transaction."""

    CASH = "cash"
    ACCOUNTS_RECEIVABLE = "accounts_receivable"
    INVENTORY = "inventory"
    FIXED_ASSETS = "fixed_assets"
    UNCLASSIFIED_ASSET = "unclassified_asset"
    ACCOUNTS_PAYABLE = "accounts_payable"
    SHORT_TERM_DEBT = "short_term_debt"
    LONG_TERM_DEBT = "long_term_debt"
    UNCLASSIFIED_LIABILITY = "unclassified_liability"


@dataclass(frozen=True)
class Classification:
    """Where a transaction lands in each statement (None = not applicable)."""

    pl_bucket: Optional[PLBucket] = None
    cash_flow_activity: Optional[CashFlowActivity] = None
    balance_sheet_line: Optional[BalanceSheetLine] = None


def normalize_category(category: Optional[str]) -> str:
    """Return the canonical form of a category used by the matching rules.

    Examples:
        " Direct Costs " -> "direct_costs"
        "Accounts Payable" -> "accounts_payable"
    """
    if category is None:
        return ""
    return "_".join(str(category).strip().lower().split())


def classify_expense(category: str) -> PLBucket:
    """Return COGS for direct/infrastructure costs, operating expense otherwise."""
    cat = normalize_category(category)
    if "direct_cost" in cat or "infrastructure" in cat or cat == "cogs":
        return PLBucket.COGS
    return PLBucket.OPERATING_EXPENSE


def classify_asset(category: str) -> BalanceSheetLine:
    cat = normalize_category(category)
    if "receivable" in cat:
        return BalanceSheetLine.ACCOUNTS_RECEIVABLE
    if "inventory" in cat:
        return BalanceSheetLine.INVENTORY
    if "equipment" in cat or "fixed" in cat or "property" in cat:
        return BalanceSheetLine.FIXED_ASSETS
    if "cash" in cat:
        return BalanceSheetLine.CASH
    return BalanceSheetLine.UNCLASSIFIED_ASSET


def classify_liability(category: str) -> BalanceSheetLine:
    cat = normalize_category(category)
    if "payable" in cat:
        return BalanceSheetLine.ACCOUNTS_PAYABLE
    if "short" in cat and "debt" in cat:
        return BalanceSheetLine.SHORT_TERM_DEBT
    if "long" in cat and "debt" in cat:
        return BalanceSheetLine.LONG_TERM_DEBT
    return BalanceSheetLine.UNCLASSIFIED_LIABILITY


def classify_cash_flow(tx_type: str, category: str) -> Optional[CashFlowActivity]:
    """Return the cash flow activity of a transaction, or None for a no-op.

    The 'affects_cash_flow' flag is not looked at here: callers must skip
    non-cash transactions before summing.
    """
    tx_type = str(tx_type).strip().lower()
    cat = normalize_category(category)

    if tx_type in ("revenue", "expense"):
        return CashFlowActivity.OPERATING

    if tx_type == "asset":
        # direct cash adjustments take precedence
        if "cash" in cat:
            return CashFlowActivity.OPERATING
        if "equipment" in cat or "inventory" in cat or "fixed" in cat:
            return CashFlowActivity.INVESTING
        return None

    if tx_type == "equity":
        return CashFlowActivity.FINANCING

    if tx_type == "liability" and ("debt" in cat or "loan" in cat):
        return CashFlowActivity.FINANCING

    return None


def classify(tx_type: str, category: str) -> Classification:
    """Classify a (type, category) pair for the three statements.

    Args:
        tx_type: Transaction type ('revenue', 'expense', 'asset',
            'liability' or 'equity'). Unknown types yield an empty
            classification.
        category: Free-form category string.

    Returns:
        A Classification with the P&L bucket, cash flow activity and
        balance sheet line (each None when not applicable).
    """
    kind = str(tx_type).strip().lower()

    pl_bucket: Optional[PLBucket] = None
    line: Optional[BalanceSheetLine] = None

    if kind == "revenue":
        pl_bucket = PLBucket.REVENUE
    elif kind == "expense":
        pl_bucket = classify_expense(category)
    elif kind == "asset":
        line = classify_asset(category)
    elif kind == "liability":
        line = classify_liability(category)

    return Classification(
        pl_bucket=pl_bucket,
        cash_flow_activity=classify_cash_flow(kind, category),
        balance_sheet_line=line,
    )
