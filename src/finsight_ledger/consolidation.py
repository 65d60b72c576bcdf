# FinSight Ledger - Financial statements & consolidation engine for SMB portfolios
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Portfolio consolidation for FinSight Ledger.

This module combines the statements of several related companies into a
single set of consolidated statements.

Overview
--------
``consolidate()`` performs, in a single pass:

1. Per-company statements
   Each company's full ledger is run through the statement calculator.
   Invalid company statements do not stop the consolidation: their errors
   are reported, prefixed with the company name.

2. Aggregation
   P&L, Cash Flow and Balance Sheet fields are summed field by field. The
   consolidated profit margin is recomputed from the summed figures.

3. Intercompany elimination
   Transactions whose category or description contains the intercompany
   marker (default 'intercompany', case-insensitive) are collected across
   all companies: asset transactions are receivables, liability
   transactions are payables (both as magnitudes). The matched amount
   ``min(receivables, payables)`` is removed from both accounts
   receivable and accounts payable (and from the asset and liability
   totals). A non-zero unmatched amount usually means one side of an
   intercompany entry was never recorded by the counterparty.

4. Equity and validation
   Consolidated equity is recomputed as total assets minus total
   liabilities after elimination; the accounting equation is then
   re-checked.

The function is pure: same input, same output, no state kept.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Optional, Union

from .config import DEFAULT_CONFIG, EngineConfig
from .engine import calculate_statements
from .statements import BalanceSheet, CashFlow, FinancialStatements, ProfitAndLoss
from .transactions import Transaction, transaction_from_mapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompanyLedger:
    """Consolidation input for one company."""

    company_id: str
    company_name: str
    transactions: tuple[Transaction, ...] = ()
    beginning_cash: float = 0.0
    prior_retained_earnings: float = 0.0


@dataclass(frozen=True)
class CompanyFinancials:
    """One company's ledger together with its computed statements."""

    company_id: str
    company_name: str
    transactions: tuple[Transaction, ...]
    beginning_cash: float
    statements: FinancialStatements


@dataclass(frozen=True)
class IntercompanyEliminations:
    """Intercompany balances found across the portfolio.

    Attributes:
        receivables: Sum of intercompany asset magnitudes.
        payables: Sum of intercompany liability magnitudes.
        eliminated: min(receivables, payables), removed from AR and AP.
        unmatched: |receivables - payables|, left on the balance sheet.
    """

    receivables: float = 0.0
    payables: float = 0.0
    eliminated: float = 0.0
    unmatched: float = 0.0


@dataclass(frozen=True)
class ConsolidatedFinancials:
    """Result of a portfolio consolidation."""

    companies: tuple[CompanyFinancials, ...]
    consolidated: FinancialStatements
    intercompany_eliminations: IntercompanyEliminations
    is_valid: bool = True
    errors: tuple[str, ...] = ()


CompanyInput = Union[CompanyLedger, Mapping[str, Any]]


def _first(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _to_ledger(company: CompanyInput) -> CompanyLedger:
    """Accept a CompanyLedger or a dict with snake_case/camelCase keys."""
    if isinstance(company, CompanyLedger):
        return company

    transactions = tuple(
        tx if isinstance(tx, Transaction) else transaction_from_mapping(tx)
        for tx in _first(company, "transactions", default=())
    )
    company_id = str(_first(company, "company_id", "companyId", default=""))
    return CompanyLedger(
        company_id=company_id,
        company_name=str(
            _first(company, "company_name", "companyName", default=company_id)
        ),
        transactions=transactions,
        beginning_cash=float(
            _first(company, "beginning_cash", "beginningCash", default=0.0)
        ),
        prior_retained_earnings=float(
            _first(
                company,
                "prior_retained_earnings",
                "priorRetainedEarnings",
                default=0.0,
            )
        ),
    )


def is_intercompany(tx: Transaction, marker: str = "intercompany") -> bool:
    """Return True if the category or description mentions the marker."""
    needle = marker.lower()
    category = (tx.category or "").lower()
    description = (tx.description or "").lower()
    return needle in category or needle in description


def identify_intercompany(
    transactions: Iterable[Transaction], marker: str = "intercompany"
) -> tuple[float, float]:
    """Return (receivables, payables) of intercompany transactions."""
    receivables = 0.0
    payables = 0.0
    for tx in transactions:
        if not is_intercompany(tx, marker):
            continue
        kind = tx.type.strip().lower()
        if kind == "asset":
            receivables += abs(tx.amount)
        elif kind == "liability":
            payables += abs(tx.amount)
    return receivables, payables


def _sum_profit_and_loss(items: Sequence[ProfitAndLoss]) -> ProfitAndLoss:
    revenue = sum(p.revenue for p in items)
    cogs = sum(p.cogs for p in items)
    operating_expenses = sum(p.operating_expenses for p in items)
    total_expenses = sum(p.total_expenses for p in items)
    net_profit = sum(p.net_profit for p in items)
    return ProfitAndLoss(
        revenue=revenue,
        cogs=cogs,
        operating_expenses=operating_expenses,
        total_expenses=total_expenses,
        net_profit=net_profit,
        profit_margin=(net_profit / revenue) * 100 if revenue > 0 else 0.0,
    )


def _sum_cash_flow(items: Sequence[CashFlow]) -> CashFlow:
    return CashFlow(
        beginning_cash=sum(c.beginning_cash for c in items),
        operating_cash_flow=sum(c.operating_cash_flow for c in items),
        investing_cash_flow=sum(c.investing_cash_flow for c in items),
        financing_cash_flow=sum(c.financing_cash_flow for c in items),
        net_cash_flow=sum(c.net_cash_flow for c in items),
        ending_cash=sum(c.ending_cash for c in items),
    )


def _sum_balance_sheet(items: Sequence[BalanceSheet]) -> BalanceSheet:
    # 'balances' is re-validated after elimination.
    return BalanceSheet(
        cash=sum(b.cash for b in items),
        accounts_receivable=sum(b.accounts_receivable for b in items),
        inventory=sum(b.inventory for b in items),
        fixed_assets=sum(b.fixed_assets for b in items),
        total_assets=sum(b.total_assets for b in items),
        accounts_payable=sum(b.accounts_payable for b in items),
        short_term_debt=sum(b.short_term_debt for b in items),
        long_term_debt=sum(b.long_term_debt for b in items),
        total_liabilities=sum(b.total_liabilities for b in items),
        retained_earnings=sum(b.retained_earnings for b in items),
        total_equity=sum(b.total_equity for b in items),
        balances=False,
    )


def consolidate(
    companies: Iterable[CompanyInput],
    config: Optional[EngineConfig] = None,
) -> ConsolidatedFinancials:
    """Consolidate the financial statements of several companies.

    Args:
        companies: CompanyLedger instances, or mappings with keys
            'company_id'/'companyId', 'company_name'/'companyName',
            'transactions' (Transaction objects or dict records) and
            optional 'beginning_cash'/'beginningCash' and
            'prior_retained_earnings'/'priorRetainedEarnings'.
        config: Engine configuration; defaults to DEFAULT_CONFIG.

    Returns:
        ConsolidatedFinancials with per-company statements, consolidated
        statements and intercompany eliminations. Errors of individual
        companies are reported with the company name as prefix; they do
        not prevent the consolidation.
    """
    cfg = config or DEFAULT_CONFIG
    tolerance = cfg.balance_tolerance
    ledgers = [_to_ledger(c) for c in companies]

    errors: list[str] = []
    company_financials: list[CompanyFinancials] = []

    # 1) Per-company statements
    for ledger in ledgers:
        statements = calculate_statements(
            ledger.transactions,
            beginning_cash=ledger.beginning_cash,
            prior_retained_earnings=ledger.prior_retained_earnings,
            config=cfg,
        )
        if not statements.is_valid:
            logger.warning(
                "Company %s (%s) has invalid statements",
                ledger.company_name,
                ledger.company_id,
            )
            errors.extend(f"{ledger.company_name}: {err}" for err in statements.errors)

        company_financials.append(
            CompanyFinancials(
                company_id=ledger.company_id,
                company_name=ledger.company_name,
                transactions=tuple(ledger.transactions),
                beginning_cash=ledger.beginning_cash,
                statements=statements,
            )
        )

    # 2) Naive aggregation
    pl = _sum_profit_and_loss([c.statements.pl for c in company_financials])
    cash_flow = _sum_cash_flow([c.statements.cash_flow for c in company_financials])
    raw = _sum_balance_sheet([c.statements.balance_sheet for c in company_financials])

    # 3) Intercompany detection
    all_transactions = [tx for ledger in ledgers for tx in ledger.transactions]
    receivables, payables = identify_intercompany(
        all_transactions, cfg.intercompany_marker
    )

    # 4) Elimination of matched amounts only
    eliminated = min(receivables, payables)
    unmatched = abs(receivables - payables)

    total_assets = raw.total_assets - eliminated
    total_liabilities = raw.total_liabilities - eliminated

    # 5) Equity from the post-elimination totals
    total_equity = total_assets - total_liabilities

    # 6) Re-validation
    balances = abs(total_assets - (total_liabilities + total_equity)) < tolerance

    balance_sheet = BalanceSheet(
        cash=raw.cash,
        accounts_receivable=raw.accounts_receivable - eliminated,
        inventory=raw.inventory,
        fixed_assets=raw.fixed_assets,
        total_assets=total_assets,
        accounts_payable=raw.accounts_payable - eliminated,
        short_term_debt=raw.short_term_debt,
        long_term_debt=raw.long_term_debt,
        total_liabilities=total_liabilities,
        retained_earnings=raw.retained_earnings,
        total_equity=total_equity,
        balances=balances,
    )

    if not balances:
        errors.append(
            f"Consolidated balance sheet does not balance: "
            f"Assets (${total_assets:.2f}) != "
            f"Liabilities (${total_liabilities:.2f}) + "
            f"Equity (${total_equity:.2f})"
        )

    if unmatched > tolerance:
        logger.warning("Unmatched intercompany balance of %.2f", unmatched)
        errors.append(
            f"Unmatched intercompany transactions: ${unmatched:.2f} "
            f"(Receivables: ${receivables:.2f}, Payables: ${payables:.2f})"
        )

    consolidated = FinancialStatements(
        pl=pl,
        balance_sheet=balance_sheet,
        cash_flow=cash_flow,
        is_valid=not errors,
        errors=tuple(errors),
    )

    logger.debug(
        "Consolidated %d companies (%d transactions), eliminated %.2f",
        len(ledgers),
        len(all_transactions),
        eliminated,
    )

    return ConsolidatedFinancials(
        companies=tuple(company_financials),
        consolidated=consolidated,
        intercompany_eliminations=IntercompanyEliminations(
            receivables=receivables,
            payables=payables,
            eliminated=eliminated,
            unmatched=unmatched,
        ),
        is_valid=not errors,
        errors=tuple(errors),
    )
