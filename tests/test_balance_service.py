from datetime import datetime

from akasia.services.balance_service import (
    calculate_balance_before, get_balance, get_ledger, get_monthly_stats, transaction_balances
)


class TestBalanceBefore:

    def test_empty_ledger_is_zero(self, app):
        assert calculate_balance_before(datetime(2025, 1, 1)) == 0

    def test_income_minus_expense_strictly_before(self, create_transaction):
        create_transaction('INCOME', 1_000_000, datetime(2025, 1, 1))
        create_transaction('EXPENSE', 250_000, datetime(2025, 1, 5))
        create_transaction('INCOME', 500_000, datetime(2025, 1, 10))

        assert calculate_balance_before(datetime(2025, 1, 10)) == 750_000
        assert calculate_balance_before(datetime(2025, 1, 11)) == 1_250_000

    def test_fuel_purchases_are_a_separate_ledger(self, create_transaction):
        create_transaction('INCOME', 1_000_000, datetime(2025, 1, 1))
        create_transaction('FUEL_PURCHASE', 300_000, datetime(2025, 1, 2))

        assert calculate_balance_before(datetime(2025, 2, 1)) == 1_000_000
        assert get_balance() == 1_000_000

    def test_soft_deleted_transactions_are_ignored(self, create_transaction):
        create_transaction('INCOME', 1_000_000, datetime(2025, 1, 1))
        create_transaction('EXPENSE', 400_000, datetime(2025, 1, 2), deleted_at=datetime(2025, 1, 3))

        assert calculate_balance_before(datetime(2025, 2, 1)) == 1_000_000

    def test_excluded_transaction_does_not_count(self, create_transaction):
        income = create_transaction('INCOME', 1_000_000, datetime(2025, 1, 1))
        create_transaction('EXPENSE', 100_000, datetime(2025, 1, 2))

        balance = calculate_balance_before(datetime(2025, 2, 1), exclude_transaction_id=income.id)
        assert balance == -100_000


class TestTransactionBalances:

    def test_expense_balance_after_subtracts_amount(self, create_transaction):
        create_transaction('INCOME', 1_000_000, datetime(2025, 1, 1))
        expense = create_transaction('EXPENSE', 200_000, datetime(2025, 1, 2))

        assert transaction_balances(expense) == {'balance_before': 1_000_000, 'balance_after': 800_000}

    def test_fuel_purchase_does_not_move_balance(self, create_transaction):
        create_transaction('INCOME', 1_000_000, datetime(2025, 1, 1))
        fuel = create_transaction('FUEL_PURCHASE', 200_000, datetime(2025, 1, 2))

        assert transaction_balances(fuel) == {'balance_before': 1_000_000, 'balance_after': 1_000_000}


class TestPeriodStats:

    def test_monthly_stats_only_count_the_month(self, create_transaction):
        create_transaction('INCOME', 900_000, datetime(2025, 1, 31, 23, 0))
        create_transaction('INCOME', 500_000, datetime(2025, 2, 1))
        create_transaction('EXPENSE', 200_000, datetime(2025, 2, 28, 23, 59))
        create_transaction('EXPENSE', 50_000, datetime(2025, 3, 1))

        assert get_monthly_stats(2025, 2) == {
            'total_income': 500_000,
            'total_expense': 200_000,
            'net': 300_000,
        }

    def test_ledger_running_balance_starts_from_opening(self, create_transaction):
        create_transaction('INCOME', 1_000_000, datetime(2025, 1, 15))
        create_transaction('INCOME', 300_000, datetime(2025, 2, 2))
        create_transaction('EXPENSE', 100_000, datetime(2025, 2, 3))
        create_transaction('FUEL_PURCHASE', 70_000, datetime(2025, 2, 4))

        ledger = get_ledger(datetime(2025, 2, 1), datetime(2025, 2, 28, 23, 59, 59))

        assert [row['balance'] for row in ledger['rows']] == [1_300_000, 1_200_000]
        assert ledger['stats'] == {
            'total_income': 300_000,
            'total_expense': 100_000,
            'opening_balance': 1_000_000,
            'closing_balance': 1_200_000,
        }
