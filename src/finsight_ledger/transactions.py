# FinSight Ledger - Financial statements & consolidation engine for SMB portfolios
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Ledger transactions for FinSight Ledger.

A transaction is the single source of truth consumed by the engine: every
figure of every statement is traceable to one or more transactions. The
ledger store (forms, bulk imports, automated postings) creates them; the
engine only reads them.

This module exposes:
- Transaction:                 immutable ledger record.
- validate_transaction_shape:  structural pre-check on a partial record.
- transaction_from_mapping:    build a Transaction from a dict-like record
                               (snake_case or camelCase keys).
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

TRANSACTION_TYPES: tuple[str, ...] = (
    "revenue",
    "expense",
    "asset",
    "liability",
    "equity",
)

REQUIRED_FIELDS: tuple[str, ...] = ("type", "category", "amount", "date")

# camelCase aliases accepted from API payloads
_KEY_ALIASES: dict[str, str] = {
    "affectsPL": "affects_pl",
    "affectsCashFlow": "affects_cash_flow",
    "affectsBalance": "affects_balance",
}


@dataclass(frozen=True)
class Transaction:
    """A dated ledger transaction.

    Attributes:
        id: Opaque unique identifier.
        date: Calendar date; placement into a period uses its year/month.
        type: One of 'revenue', 'expense', 'asset', 'liability', 'equity'.
        category: Free-form category, interpreted by the classifier.
        amount: Signed amount. Positive increases the natural balance of
            the account (asset acquisition, liability increase, ...).
        description: Optional free text, not used in calculations except
            for intercompany detection.
        affects_pl: Include in the Profit & Loss statement.
        affects_cash_flow: Include in the Cash Flow statement.
        affects_balance: Include in the Balance Sheet.
    """

    id: str
    date: date
    type: str
    category: str
    amount: float
    description: Optional[str] = None
    affects_pl: bool = True
    affects_cash_flow: bool = True
    affects_balance: bool = True


def _normalize_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    return {_KEY_ALIASES.get(str(k), str(k)): v for k, v in data.items()}


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def validate_transaction_shape(partial: Mapping[str, Any]) -> list[str]:
    """Return the list of missing required fields of a transaction record.

    Only the structure is checked: 'type', 'category', 'amount' and 'date'
    must be present and non-empty. Unknown categories are accepted; they
    simply fall through classification. An amount of 0 is valid.

    Args:
        partial: Dict-like record (snake_case or camelCase keys).

    Returns:
        A list of human-readable error messages. Empty means structurally
        valid.
    """
    data = _normalize_keys(partial)
    errors: list[str] = []
    for field in REQUIRED_FIELDS:
        if _is_missing(data.get(field)):
            errors.append(f"Transaction {field} is required")
    return errors


def _to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError as exc:
        raise ValueError(
            f"Invalid transaction date {value!r}, expected YYYY-MM-DD format."
        ) from exc


def _to_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "y")
    return bool(value)


def transaction_from_mapping(data: Mapping[str, Any]) -> Transaction:
    """Build a Transaction from a dict-like record.

    Accepted keys are the Transaction attribute names, plus the camelCase
    flag names used by the dashboard API ('affectsPL', 'affectsCashFlow',
    'affectsBalance'). Flags default to True when absent. Dates may be
    `date`, `datetime` or ISO strings.

    Raises:
        ValueError: if required fields are missing, the type is unknown,
            or the date/amount cannot be parsed.
    """
    errors = validate_transaction_shape(data)
    if errors:
        raise ValueError("; ".join(errors))

    record = _normalize_keys(data)

    tx_type = str(record["type"]).strip().lower()
    if tx_type not in TRANSACTION_TYPES:
        raise ValueError(
            f"Unknown transaction type {record['type']!r}. "
            f"Expected one of: {', '.join(TRANSACTION_TYPES)}."
        )

    try:
        amount = float(record["amount"])
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid transaction amount {record['amount']!r}.") from exc

    description = record.get("description")
    return Transaction(
        id="" if record.get("id") is None else str(record["id"]),
        date=_to_date(record["date"]),
        type=tx_type,
        category=str(record["category"]),
        amount=amount,
        description=None if description is None else str(description),
        affects_pl=_to_bool(record.get("affects_pl"), True),
        affects_cash_flow=_to_bool(record.get("affects_cash_flow"), True),
        affects_balance=_to_bool(record.get("affects_balance"), True),
    )
