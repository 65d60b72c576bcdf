from datetime import date
from pathlib import Path

import pandas as pd
import pytest

from finsight_ledger.engine import calculate_statements
from finsight_ledger.io import read_transactions, transactions_from_frame


def _write_csv(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "ledger.csv"
    path.write_text(content, encoding="utf-8")
    return path


def test_read_transactions_from_csv(tmp_path: Path) -> None:
    path = _write_csv(
        tmp_path,
        "id,date,type,category,amount,description,affectsPL,affectsCashFlow,affectsBalance\n"
        "t1,2026-01-05,revenue,Sales,1000,,true,true,true\n"
        "t2,2026-01-20,Expense,direct_costs,200,Supplier,true,true,true\n"
        "t3,2026-01-25,revenue,Consulting,400,Invoice 7,true,false,true\n",
    )

    transactions = read_transactions(path)

    assert [t.id for t in transactions] == ["t1", "t2", "t3"]
    assert transactions[0].date == date(2026, 1, 5)
    assert transactions[0].description is None
    assert transactions[1].type == "expense"
    assert transactions[1].description == "Supplier"
    assert transactions[2].affects_cash_flow is False

    statements = calculate_statements(transactions, 0)
    assert statements.pl.net_profit == pytest.approx(1200)
    assert statements.balance_sheet.accounts_receivable == pytest.approx(400)
    assert statements.is_valid


def test_optional_columns_use_defaults(tmp_path: Path) -> None:
    path = _write_csv(
        tmp_path,
        "Date,Type,Category,Amount\n"
        "2026-02-01,revenue,Sales,50\n"
        "2026-02-02,expense,admin,20\n",
    )

    transactions = read_transactions(path)

    assert [t.id for t in transactions] == ["1", "2"]
    assert all(t.affects_pl for t in transactions)
    assert all(t.affects_cash_flow for t in transactions)
    assert all(t.affects_balance for t in transactions)


def test_missing_columns_raise() -> None:
    df = pd.DataFrame({"date": ["2026-01-01"], "amount": [10]})
    with pytest.raises(ValueError, match="Missing column"):
        transactions_from_frame(df)


def test_non_numeric_amount_raises() -> None:
    df = pd.DataFrame(
        {
            "date": ["2026-01-01"],
            "type": ["revenue"],
            "category": ["Sales"],
            "amount": ["abc"],
        }
    )
    with pytest.raises(ValueError, match="amount"):
        transactions_from_frame(df)


def test_invalid_row_is_named() -> None:
    df = pd.DataFrame(
        {
            "date": ["2026-01-01", "2026-01-02"],
            "type": ["revenue", "transfer"],
            "category": ["Sales", "Misc"],
            "amount": [10, 20],
        }
    )
    with pytest.raises(ValueError, match="Invalid ledger row 2"):
        transactions_from_frame(df)


def test_missing_category_is_reported() -> None:
    df = pd.DataFrame(
        {
            "date": ["2026-01-01"],
            "type": ["revenue"],
            "category": [None],
            "amount": [10],
        }
    )
    with pytest.raises(ValueError, match="Transaction category is required"):
        transactions_from_frame(df)


def test_bad_amount_names_its_row() -> None:
    df = pd.DataFrame(
        {
            "date": ["2026-01-01", "2026-01-02", "2026-01-03"],
            "type": ["revenue", "revenue", "expense"],
            "category": ["Sales", "Sales", "admin"],
            "amount": ["10", "20", "n/a"],
        }
    )
    with pytest.raises(ValueError, match=r"Invalid ledger row 3: .*'amount' column"):
        transactions_from_frame(df)


def test_bad_date_names_its_row(tmp_path: Path) -> None:
    path = _write_csv(
        tmp_path,
        "date,type,category,amount\n"
        "2026-01-01,revenue,Sales,10\n"
        "not-a-date,revenue,Sales,20\n",
    )
    with pytest.raises(ValueError, match=r"Invalid ledger row 2: .*'date' column"):
        read_transactions(path)
