# FinSight Ledger - Financial statements & consolidation engine for SMB portfolios
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for FinSight Ledger.

This module flattens engine results into long-format pandas DataFrames
for presentation layers (dashboard charts, CSV exports, BI tools). One row
represents one statement line for one period (or one company), which makes
filtering, pivoting and plotting straightforward.

Columns of the statement frames
-------------------------------
- period_label : str   ('2025-01', '2025-Q1', '2025', or 'snapshot')
- period       : date  (first day of the period; None for snapshots)
- statement    : str   ('pl', 'cash_flow', 'balance_sheet')
- line         : str   (field name, e.g. 'revenue', 'ending_cash')
- amount       : float (rounded to 2 decimals)
- currency     : str   (EngineConfig.currency, e.g. 'USD')

The engine itself never rounds; rounding only happens here.
"""

from dataclasses import fields
from datetime import date
from typing import Any, Optional, Sequence

import pandas as pd

from .config import DEFAULT_CONFIG, EngineConfig
from .consolidation import ConsolidatedFinancials
from .periods import PeriodStatement
from .statements import FinancialStatements

STATEMENT_COLUMNS: list[str] = [
    "period_label",
    "period",
    "statement",
    "line",
    "amount",
    "currency",
]

CONSOLIDATED_COLUMNS: list[str] = [
    "company_id",
    "company_name",
    "statement",
    "line",
    "amount",
    "currency",
]


def _statement_rows(
    statements: FinancialStatements,
    period_label: str,
    period: Optional[date],
    currency: str,
) -> list[dict[str, Any]]:
    """Return one row per numeric line of the three statements."""
    rows: list[dict[str, Any]] = []
    for statement_key, statement in (
        ("pl", statements.pl),
        ("cash_flow", statements.cash_flow),
        ("balance_sheet", statements.balance_sheet),
    ):
        for f in fields(statement):
            value = getattr(statement, f.name)
            # 'balances' is a flag, not an amount
            if isinstance(value, bool):
                continue
            rows.append(
                {
                    "period_label": period_label,
                    "period": period,
                    "statement": statement_key,
                    "line": f.name,
                    "amount": round(float(value), 2),
                    "currency": currency,
                }
            )
    return rows


def statements_to_frame(
    statements: FinancialStatements,
    label: str = "snapshot",
    config: Optional[EngineConfig] = None,
) -> pd.DataFrame:
    """Flatten a single FinancialStatements into a long-format DataFrame."""
    cfg = config or DEFAULT_CONFIG
    return pd.DataFrame(
        _statement_rows(statements, label, None, cfg.currency),
        columns=STATEMENT_COLUMNS,
    )


def period_statements_to_frame(
    periods: Sequence[PeriodStatement],
    config: Optional[EngineConfig] = None,
) -> pd.DataFrame:
    """Flatten a period sequence into a long-format DataFrame.

    Rows are ordered by period, then statement, then line (in field order).
    An empty sequence yields an empty DataFrame with the expected columns.
    """
    cfg = config or DEFAULT_CONFIG
    rows: list[dict[str, Any]] = []
    for item in periods:
        rows.extend(
            _statement_rows(item.statements, item.label, item.period, cfg.currency)
        )
    return pd.DataFrame(rows, columns=STATEMENT_COLUMNS)


def period_validation_frame(periods: Sequence[PeriodStatement]) -> pd.DataFrame:
    """Return one row per period with its bounds, validity and joined errors."""
    rows = [
        {
            "period_label": item.label,
            "period": item.period,
            "period_end": item.end,
            "transactions": len(item.transactions),
            "is_valid": item.statements.is_valid,
            "errors": "; ".join(item.statements.errors),
        }
        for item in periods
    ]
    return pd.DataFrame(
        rows,
        columns=[
            "period_label",
            "period",
            "period_end",
            "transactions",
            "is_valid",
            "errors",
        ],
    )


def consolidated_to_frame(
    result: ConsolidatedFinancials,
    config: Optional[EngineConfig] = None,
) -> pd.DataFrame:
    """Flatten a consolidation into a long-format DataFrame.

    Columns: company_id, company_name, statement, line, amount, currency.
    Each company contributes its own rows, followed by the consolidated
    rows (company_id 'consolidated') and the intercompany elimination
    figures (statement 'intercompany').
    """
    cfg = config or DEFAULT_CONFIG
    rows: list[dict[str, Any]] = []

    def add(company_id: str, company_name: str, statements: FinancialStatements):
        for row in _statement_rows(statements, company_id, None, cfg.currency):
            rows.append(
                {
                    "company_id": company_id,
                    "company_name": company_name,
                    "statement": row["statement"],
                    "line": row["line"],
                    "amount": row["amount"],
                    "currency": row["currency"],
                }
            )

    for company in result.companies:
        add(company.company_id, company.company_name, company.statements)

    add("consolidated", "Consolidated", result.consolidated)

    eliminations = result.intercompany_eliminations
    for f in fields(eliminations):
        rows.append(
            {
                "company_id": "consolidated",
                "company_name": "Consolidated",
                "statement": "intercompany",
                "line": f.name,
                "amount": round(float(getattr(eliminations, f.name)), 2),
                "currency": cfg.currency,
            }
        )

    return pd.DataFrame(rows, columns=CONSOLIDATED_COLUMNS)
