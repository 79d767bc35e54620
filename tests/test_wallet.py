from datetime import datetime, timedelta

from akasia.extensions import db
from akasia.models.wallet import Wallet, WalletEntry
from akasia.services.wallet_service import (
    get_or_create_wallet, get_wallet_balance, get_wallet_overview
)


def add_entry(wallet, user, entry_type, amount, occurred_at=None, source='MANUAL'):
    entry = WalletEntry(
        wallet=wallet,
        type=entry_type,
        source=source,
        amount=amount,
        occurred_at=occurred_at or datetime.utcnow(),
        created_by=user,
    )
    db.session.add(entry)
    db.session.commit()
    return entry


class TestWalletBalance:

    def test_single_global_wallet_is_created_once(self, app):
        first = get_or_create_wallet()
        second = get_or_create_wallet()

        assert first.id == second.id
        assert first.name == 'Global Wallet'
        assert Wallet.query.count() == 1

    def test_balance_is_credits_minus_debits(self, operator):
        wallet = get_or_create_wallet()
        add_entry(wallet, operator, 'CREDIT', 50_000, source='CASHBACK')
        add_entry(wallet, operator, 'CREDIT', 20_000)
        add_entry(wallet, operator, 'DEBIT', 30_000)

        overview = get_wallet_overview()
        assert overview['balance'] == 40_000
        assert get_wallet_balance(wallet) == 40_000

    def test_overview_lists_latest_entries_first(self, operator):
        wallet = get_or_create_wallet()
        now = datetime.utcnow()
        for days in range(5):
            add_entry(wallet, operator, 'CREDIT', 1_000 * (days + 1), occurred_at=now - timedelta(days=days))

        overview = get_wallet_overview(limit=3)
        assert [entry.amount for entry in overview['entries']] == [1_000, 2_000, 3_000]
        assert overview['balance'] == 15_000


class TestWalletEndpoints:

    def test_manual_entry_moves_balance(self, client, operator_headers):
        response = client.post('/wallet/entries', json={
            'type': 'DEBIT',
            'amount': 15_000,
            'description': 'Parkir',
        }, headers=operator_headers)
        assert response.status_code == 201
        assert response.get_json()['source'] == 'MANUAL'

        overview = client.get('/wallet', headers=operator_headers).get_json()
        assert overview['balance'] == -15_000
        assert overview['wallet']['name'] == 'Global Wallet'
        assert len(overview['entries']) == 1

    def test_non_positive_amount_is_rejected(self, client, operator_headers):
        response = client.post('/wallet/entries', json={'type': 'CREDIT', 'amount': 0}, headers=operator_headers)

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Jumlah wajib diisi'
        assert WalletEntry.query.count() == 0
