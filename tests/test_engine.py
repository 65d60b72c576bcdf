from datetime import date

import pytest

from finsight_ledger.config import EngineConfig
from finsight_ledger.engine import (
    calculate_cash_flow,
    calculate_profit_and_loss,
    calculate_statements,
    validate_statements,
)
from finsight_ledger.statements import BalanceSheet, CashFlow
from finsight_ledger.transactions import Transaction


def tx(
    tx_type: str,
    category: str,
    amount: float,
    day: date = date(2026, 1, 1),
    pl: bool = True,
    cash: bool = True,
    balance: bool = True,
    tx_id: str = "",
) -> Transaction:
    return Transaction(
        id=tx_id or f"{tx_type}-{category}-{amount}",
        date=day,
        type=tx_type,
        category=category,
        amount=amount,
        affects_pl=pl,
        affects_cash_flow=cash,
        affects_balance=balance,
    )


def test_revenue_and_operating_expense() -> None:
    statements = calculate_statements(
        [tx("revenue", "Sales", 1000), tx("expense", "admin", 300)], 0
    )

    pl = statements.pl
    assert pl.revenue == pytest.approx(1000)
    assert pl.cogs == pytest.approx(0)
    assert pl.operating_expenses == pytest.approx(300)
    assert pl.net_profit == pytest.approx(700)
    assert pl.profit_margin == pytest.approx(70)

    assert statements.cash_flow.ending_cash == pytest.approx(700)

    bs = statements.balance_sheet
    assert bs.cash == pytest.approx(700)
    assert bs.total_assets == pytest.approx(700)
    assert bs.total_equity == pytest.approx(700)
    assert bs.balances is True
    assert statements.is_valid
    assert statements.errors == ()


def test_cogs_separated_from_operating_expenses() -> None:
    pl = calculate_profit_and_loss(
        [
            tx("revenue", "Sales", 1000),
            tx("expense", "direct_costs", 200),
            tx("expense", "admin", 300),
        ]
    )

    assert pl.cogs == pytest.approx(200)
    assert pl.operating_expenses == pytest.approx(300)
    assert pl.total_expenses == pytest.approx(500)
    assert pl.net_profit == pytest.approx(500)


def test_single_expense_gives_negative_equity_that_still_balances() -> None:
    statements = calculate_statements([tx("expense", "Admin", 500)], 0)

    assert statements.cash_flow.ending_cash == pytest.approx(-500)
    assert statements.balance_sheet.cash == pytest.approx(-500)
    assert statements.balance_sheet.total_equity == pytest.approx(-500)
    assert statements.balance_sheet.retained_earnings == pytest.approx(-500)
    assert statements.balance_sheet.balances is True
    assert statements.is_valid


@pytest.mark.parametrize("amount", [-100, 100])
def test_liabilities_are_never_negative(amount) -> None:
    statements = calculate_statements(
        [tx("liability", "Accounts Payable", amount, pl=False, cash=False)], 0
    )

    bs = statements.balance_sheet
    assert bs.accounts_payable == pytest.approx(100)
    assert bs.total_liabilities >= 0


def test_empty_ledger_is_all_zero_and_valid() -> None:
    statements = calculate_statements([], 0)

    assert statements.pl.revenue == 0
    assert statements.pl.profit_margin == 0
    assert statements.cash_flow.ending_cash == 0
    assert statements.balance_sheet.total_assets == 0
    assert statements.balance_sheet.total_liabilities == 0
    assert statements.balance_sheet.total_equity == 0
    assert statements.balance_sheet.balances is True
    assert statements.is_valid
    assert statements.errors == ()


def test_loss_profit_margin() -> None:
    pl = calculate_profit_and_loss(
        [tx("revenue", "Sales", 100), tx("expense", "Admin", 500)]
    )
    assert pl.net_profit == pytest.approx(-400)
    assert pl.profit_margin == pytest.approx(-400)


def test_revenue_and_expense_use_magnitudes() -> None:
    statements = calculate_statements(
        [tx("revenue", "Sales", -1000), tx("expense", "Admin", -300)], 0
    )
    assert statements.pl.revenue == pytest.approx(1000)
    assert statements.pl.operating_expenses == pytest.approx(300)
    assert statements.cash_flow.operating_cash_flow == pytest.approx(700)


def test_beginning_cash_is_carried_into_ending_cash() -> None:
    cash_flow = calculate_cash_flow([tx("revenue", "Sales", 100)], 500)

    assert cash_flow.beginning_cash == pytest.approx(500)
    assert cash_flow.operating_cash_flow == pytest.approx(100)
    assert cash_flow.ending_cash == pytest.approx(600)


def test_opening_cash_without_opening_equity_is_reported() -> None:
    statements = calculate_statements([tx("revenue", "Sales", 100)], 500)

    assert statements.balance_sheet.cash == pytest.approx(600)
    assert statements.balance_sheet.total_equity == pytest.approx(100)
    assert statements.balance_sheet.balances is False
    assert not statements.is_valid
    assert len(statements.errors) == 1
    assert statements.errors[0].startswith("Balance sheet does not balance")
    assert "Assets ($600.00)" in statements.errors[0]
    assert "Difference: $500.00" in statements.errors[0]


def test_opening_retained_earnings_balance_opening_cash() -> None:
    statements = calculate_statements(
        [tx("revenue", "Sales", 100)], 500, prior_retained_earnings=500
    )

    assert statements.balance_sheet.retained_earnings == pytest.approx(600)
    assert statements.balance_sheet.balances is True
    assert statements.is_valid


def test_non_cash_revenue_creates_receivable() -> None:
    statements = calculate_statements(
        [tx("revenue", "Consulting", 400, cash=False)], 0
    )

    assert statements.pl.revenue == pytest.approx(400)
    assert statements.cash_flow.ending_cash == pytest.approx(0)
    assert statements.balance_sheet.accounts_receivable == pytest.approx(400)
    assert statements.balance_sheet.total_equity == pytest.approx(400)
    assert statements.balance_sheet.balances is True


def test_non_cash_expense_creates_payable() -> None:
    statements = calculate_statements([tx("expense", "Hosting", 250, cash=False)], 0)

    assert statements.balance_sheet.accounts_payable == pytest.approx(250)
    assert statements.balance_sheet.total_equity == pytest.approx(-250)
    assert statements.balance_sheet.total_assets == pytest.approx(0)
    assert statements.balance_sheet.balances is True


def test_accrual_without_balance_flag_is_ignored_on_balance_sheet() -> None:
    statements = calculate_statements(
        [tx("revenue", "Consulting", 400, cash=False, balance=False)], 0
    )
    assert statements.balance_sheet.accounts_receivable == 0


def test_debt_is_financing_and_long_term_liability() -> None:
    statements = calculate_statements([tx("liability", "long_term_debt", 1000, pl=False)], 0)

    assert statements.cash_flow.financing_cash_flow == pytest.approx(1000)
    assert statements.balance_sheet.cash == pytest.approx(1000)
    assert statements.balance_sheet.long_term_debt == pytest.approx(1000)
    assert statements.balance_sheet.balances is True


def test_short_term_debt_line() -> None:
    statements = calculate_statements(
        [tx("liability", "Short Term Debt", -200, pl=False, cash=False)], 0
    )
    assert statements.balance_sheet.short_term_debt == pytest.approx(200)


def test_equipment_uses_signed_amount_in_investing() -> None:
    statements = calculate_statements(
        [tx("asset", "equipment", -2000, pl=False, balance=False)], 0
    )

    assert statements.cash_flow.investing_cash_flow == pytest.approx(-2000)
    assert statements.cash_flow.operating_cash_flow == 0
    assert statements.balance_sheet.fixed_assets == 0


def test_asset_lines_accumulate_signed_amounts() -> None:
    statements = calculate_statements(
        [
            tx("asset", "inventory", 300, pl=False, cash=False),
            tx("asset", "inventory", -100, pl=False, cash=False),
            tx("asset", "accounts_receivable", 50, pl=False, cash=False),
            tx("asset", "property", 700, pl=False, cash=False),
        ],
        0,
    )

    bs = statements.balance_sheet
    assert bs.inventory == pytest.approx(200)
    assert bs.accounts_receivable == pytest.approx(50)
    assert bs.fixed_assets == pytest.approx(700)
    assert bs.total_assets == pytest.approx(950)


def test_cash_adjustment_is_operating_and_not_a_separate_line() -> None:
    statements = calculate_statements(
        [tx("asset", "cash", 300, pl=False)], 0
    )

    assert statements.cash_flow.operating_cash_flow == pytest.approx(300)
    assert statements.balance_sheet.cash == pytest.approx(300)
    assert statements.balance_sheet.total_assets == pytest.approx(300)


def test_non_cash_transactions_never_reach_cash_flow() -> None:
    cash_flow = calculate_cash_flow(
        [
            tx("equity", "capital", 5000, pl=False, cash=False),
            tx("liability", "bank loan", 1000, pl=False, cash=False),
            tx("revenue", "Sales", 100, cash=False),
        ],
        0,
    )

    assert cash_flow.net_cash_flow == 0
    assert cash_flow.ending_cash == 0


def test_unclassified_combinations_are_no_ops() -> None:
    cash_flow = calculate_cash_flow(
        [
            tx("liability", "accounts payable", 100, pl=False),
            tx("asset", "prepaid", 100, pl=False),
        ],
        0,
    )
    assert cash_flow.net_cash_flow == 0


def test_balance_sheet_cash_matches_cash_flow() -> None:
    statements = calculate_statements(
        [
            tx("revenue", "Sales", 1234.56),
            tx("expense", "infrastructure", 99.99),
            tx("equity", "capital", 1000, pl=False),
            tx("asset", "equipment", -300, pl=False),
        ],
        250,
    )
    assert statements.balance_sheet.cash == statements.cash_flow.ending_cash


def test_calculation_is_idempotent_and_does_not_reorder_input() -> None:
    ledger = [
        tx("expense", "admin", 300, day=date(2026, 3, 1)),
        tx("revenue", "Sales", 1000, day=date(2026, 1, 1)),
        tx("expense", "direct_costs", 200, day=date(2026, 2, 1), cash=False),
    ]
    snapshot = list(ledger)

    first = calculate_statements(ledger, 100)
    second = calculate_statements(ledger, 100)

    assert first == second
    assert ledger == snapshot


def test_tolerance_comes_from_config() -> None:
    loose = EngineConfig(balance_tolerance=1000.0)
    statements = calculate_statements([tx("revenue", "Sales", 100)], 500, config=loose)
    assert statements.balance_sheet.balances is True
    assert statements.is_valid


def test_validate_statements_reports_cash_mismatch_independently() -> None:
    balance_sheet = BalanceSheet(cash=100.0, total_assets=100.0, balances=False)
    cash_flow = CashFlow(ending_cash=50.0)

    errors = validate_statements(balance_sheet, cash_flow)

    assert len(errors) == 2
    assert errors[0].startswith("Balance sheet does not balance")
    assert errors[1] == "Cash mismatch: Balance Sheet ($100.00) != Cash Flow ($50.00)"
