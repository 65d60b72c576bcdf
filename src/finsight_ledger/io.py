# FinSight Ledger - Financial statements & consolidation engine for SMB portfolios
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for FinSight Ledger.

This module reads a ledger export (CSV) and turns it into Transaction
records suitable for the engine.

Expected input format
---------------------
Column names are case-insensitive and may use snake_case or camelCase:

    id, date, type, category, amount, description,
    affects_pl, affects_cash_flow, affects_balance

- ``date``, ``type``, ``category`` and ``amount`` are required.
- ``id`` defaults to the 1-based row number when absent.
- ``description`` is optional.
- The three flag columns are optional and default to true. Accepted truthy
  values: 1, true, yes, y (case-insensitive).

Invalid dates, amounts or types raise a ValueError naming the offending
row, so that a bad export is rejected before it reaches the engine.
"""

import os
from typing import Union

import pandas as pd

from .transactions import REQUIRED_FIELDS, Transaction, transaction_from_mapping

_COLUMN_ALIASES: dict[str, str] = {
    "affectspl": "affects_pl",
    "affectscashflow": "affects_cash_flow",
    "affectsbalance": "affects_balance",
}


def _normalize_column(name: str) -> str:
    key = str(name).strip().lower()
    return _COLUMN_ALIASES.get(key, key)


def _first_row(mask: pd.Series) -> int:
    """Return the 1-based position of the first True value of a mask."""
    return int(mask.to_numpy().argmax()) + 1


def transactions_from_frame(df: pd.DataFrame) -> list[Transaction]:
    """Convert a ledger DataFrame into Transaction records.

    Args:
        df: DataFrame with at least 'date', 'type', 'category' and 'amount'
            columns (case-insensitive).

    Returns:
        A list of Transaction, in row order.

    Raises:
        ValueError: if required columns are missing or a row is invalid.
    """
    d = df.copy()
    d.columns = [_normalize_column(c) for c in d.columns]

    missing = [c for c in REQUIRED_FIELDS if c not in d.columns]
    if missing:
        raise ValueError(
            "Invalid ledger structure. Missing column(s): "
            f"{', '.join(missing)}. Expected at least: "
            f"{', '.join(REQUIRED_FIELDS)}."
        )

    raw_dates = d["date"]
    d["date"] = pd.to_datetime(raw_dates, errors="coerce")
    bad_dates = d["date"].isna() & raw_dates.notna()
    if bad_dates.any():
        row = _first_row(bad_dates)
        raise ValueError(
            f"Invalid ledger row {row}: invalid value "
            f"{raw_dates.iloc[row - 1]!r} in 'date' column."
        )

    raw_amounts = d["amount"]
    d["amount"] = pd.to_numeric(raw_amounts, errors="coerce")
    bad_amounts = d["amount"].isna()
    if bad_amounts.any():
        row = _first_row(bad_amounts)
        raise ValueError(
            f"Invalid ledger row {row}: invalid numeric value "
            f"{raw_amounts.iloc[row - 1]!r} in 'amount' column."
        )

    # NaN -> None so that optional fields fall back to their defaults.
    d = d.astype(object).where(pd.notna(d), None)

    transactions: list[Transaction] = []
    for position, record in enumerate(d.to_dict(orient="records"), start=1):
        if record["date"] is not None:
            record["date"] = record["date"].date()
        if record.get("id") is None:
            record["id"] = str(position)
        try:
            transactions.append(transaction_from_mapping(record))
        except ValueError as exc:
            raise ValueError(f"Invalid ledger row {position}: {exc}") from exc

    return transactions


def read_transactions(path: Union[str, "os.PathLike[str]"]) -> list[Transaction]:
    """
    Read a ledger CSV file and return its transactions.

    Parameters
    ----------
    path:
        Path to the CSV file.

    Returns
    -------
    list[Transaction]
        Transactions in file order.

    Raises
    ------
    ValueError
        If the CSV structure is invalid or a row cannot be parsed.
    """
    df = pd.read_csv(path)
    return transactions_from_frame(df)
