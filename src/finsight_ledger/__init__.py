# FinSight Ledger - Financial statements & consolidation engine for SMB portfolios
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
FinSight Ledger
---------------

A Python financial statement engine for multi-company business dashboards.
It derives Profit & Loss, Cash Flow and Balance Sheet statements from a
flat ledger of dated transactions, and consolidates them across a
portfolio of related companies.

Main capabilities:
- category-based classification of ledger transactions,
- single-snapshot statements with accounting-equation validation,
- period-by-period statements (month, quarter, year) with cash
  carry-forward and running balances,
- portfolio consolidation with intercompany receivable/payable
  elimination,
- CSV ledger reading and long-format DataFrame views (pandas).

The engine is pure and stateless: every call recomputes its results from
the transactions it is given. Persistence and presentation are left to
the caller.

Version: 0.1.0

Usage:
    from finsight_ledger import calculate_statements, calculate_periods
"""

from .classifier import classify
from .config import DEFAULT_CONFIG, EngineConfig, load_engine_config
from .consolidation import CompanyLedger, ConsolidatedFinancials, consolidate
from .engine import calculate_statements
from .periods import PeriodStatement, calculate_periods
from .statements import BalanceSheet, CashFlow, FinancialStatements, ProfitAndLoss
from .transactions import (
    Transaction,
    transaction_from_mapping,
    validate_transaction_shape,
)

__all__ = [
    "BalanceSheet",
    "CashFlow",
    "CompanyLedger",
    "ConsolidatedFinancials",
    "DEFAULT_CONFIG",
    "EngineConfig",
    "FinancialStatements",
    "PeriodStatement",
    "ProfitAndLoss",
    "Transaction",
    "calculate_periods",
    "calculate_statements",
    "classify",
    "consolidate",
    "load_engine_config",
    "transaction_from_mapping",
    "validate_transaction_shape",
]

__version__ = "0.1.0"
