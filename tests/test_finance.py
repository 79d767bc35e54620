import json
from datetime import datetime

import pytest
from sqlalchemy.exc import SQLAlchemyError

from akasia.extensions import db
from akasia.models.transaction import ExpenseItem, Transaction


def expense_body(**overrides):
    body = {
        'date': '2025-03-12T09:00:00',
        'description': 'Servis Innova',
        'items': [
            {'description': 'Oli', 'quantity': 4, 'unit_price': 60_000},
            {'description': 'Jasa', 'quantity': 1, 'unit_price': 100_000},
        ],
    }
    body.update(overrides)
    return body


class TestIncomeAndExpense:

    def test_income_uses_source_as_description(self, client, operator, operator_headers):
        response = client.post('/finance/income', json={
            'amount': 5_000_000, 'source': 'Donatur', 'date': '2025-03-01T08:00:00',
        }, headers=operator_headers)

        assert response.status_code == 201
        data = response.get_json()
        assert data['type'] == 'INCOME'
        assert data['description'] == 'Donatur'
        assert data['income']['source'] == 'Donatur'
        assert data['user']['username'] == operator.username

    def test_income_amount_must_be_positive(self, client, operator_headers):
        response = client.post('/finance/income', json={
            'amount': -1, 'source': 'Donatur', 'date': '2025-03-01T08:00:00',
        }, headers=operator_headers)

        assert response.status_code == 400
        assert Transaction.query.count() == 0

    def test_expense_amount_is_sum_of_items(self, client, operator_headers, create_car):
        car = create_car()
        body = expense_body()
        body['items'][0]['car_id'] = car.id

        response = client.post('/finance/expense', json=body, headers=operator_headers)

        assert response.status_code == 201
        data = response.get_json()
        assert data['amount'] == 340_000
        assert data['expense']['items'][0]['total'] == 240_000
        assert data['expense']['items'][0]['car']['id'] == car.id

    def test_expense_needs_items(self, client, operator_headers):
        response = client.post('/finance/expense', json=expense_body(items=[]), headers=operator_headers)

        assert response.status_code == 400
        assert response.get_json()['error'] == 'At least one item is required'

    def test_expense_with_receipt_image(self, client, operator_headers, image_file, uploads):
        response = client.post('/finance/expense', data={
            'payload': json.dumps(expense_body()),
            'receipt': image_file(),
        }, headers=operator_headers, content_type='multipart/form-data')

        assert response.status_code == 201
        assert response.get_json()['expense']['receipt_url'].startswith(
            'http://storage.test/storage/v1/object/public/akasia/receipts/'
        )
        assert len(uploads) == 1

    def test_update_expense_replaces_items(self, client, operator_headers):
        created = client.post('/finance/expense', json=expense_body(), headers=operator_headers).get_json()

        response = client.put(f"/finance/expense/{created['id']}", json=expense_body(items=[
            {'description': 'Ban', 'quantity': 1, 'unit_price': 800_000},
        ]), headers=operator_headers)

        assert response.status_code == 200
        assert response.get_json()['amount'] == 800_000
        assert ExpenseItem.query.count() == 1

    def test_update_income_through_expense_route_is_not_found(self, client, operator_headers,
                                                              create_transaction):
        income = create_transaction('INCOME', 1000, datetime(2025, 3, 1))

        response = client.put(f'/finance/expense/{income.id}', json=expense_body(), headers=operator_headers)

        assert response.status_code == 404

    def test_delete_is_soft_and_leaves_balance(self, client, operator_headers, create_transaction):
        income = create_transaction('INCOME', 1000, datetime(2025, 3, 1))

        response = client.delete(f'/finance/transactions/{income.id}', headers=operator_headers)

        assert response.status_code == 200
        assert Transaction.query.count() == 1
        assert client.get('/finance/balance', headers=operator_headers).get_json() == {'balance': 0}
        assert client.get(f'/finance/transactions/{income.id}', headers=operator_headers).status_code == 404

    def test_transaction_detail_includes_balances(self, client, operator_headers, create_transaction):
        create_transaction('INCOME', 10_000, datetime(2025, 3, 1))
        expense = create_transaction('EXPENSE', 2_500, datetime(2025, 3, 2))

        data = client.get(f'/finance/transactions/{expense.id}', headers=operator_headers).get_json()

        assert data['balance_before'] == 10_000
        assert data['balance_after'] == 7_500

    def test_list_excludes_fuel_purchases(self, client, operator_headers, create_transaction):
        create_transaction('INCOME', 10_000, datetime(2025, 3, 1))
        create_transaction('FUEL_PURCHASE', 300, datetime(2025, 3, 2))

        data = client.get('/finance/transactions', headers=operator_headers).get_json()

        assert [row['type'] for row in data] == ['INCOME']

    def test_list_rejects_unknown_type(self, client, operator_headers):
        response = client.get('/finance/transactions?type=TRANSFER', headers=operator_headers)

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Tipe transaksi tidak valid'

    def test_list_rejects_month_out_of_range(self, client, operator_headers):
        response = client.get('/finance/transactions?year=2025&month=13', headers=operator_headers)

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Bulan harus antara 1 dan 12'

    def test_failed_delete_is_rolled_back(self, client, operator_headers, create_transaction, monkeypatch):
        transaction = create_transaction('INCOME', 10_000, datetime(2025, 3, 1))
        transaction_id = transaction.id

        def failing_commit():
            raise SQLAlchemyError('database unavailable')

        monkeypatch.setattr(db.session, 'commit', failing_commit)
        response = client.delete(f'/finance/transactions/{transaction_id}', headers=operator_headers)

        assert response.status_code == 500
        assert response.get_json()['error'] == 'Gagal menghapus transaksi'
        assert db.session.get(Transaction, transaction_id).deleted_at is None


class TestHijriLedger:

    def test_ramadhan_ledger_carries_previous_balance(self, client, operator_headers, create_transaction):
        create_transaction('INCOME', 1_000_000, datetime(2025, 2, 10))
        create_transaction('INCOME', 500_000, datetime(2025, 3, 10))
        create_transaction('EXPENSE', 200_000, datetime(2025, 3, 15))
        create_transaction('FUEL_PURCHASE', 90_000, datetime(2025, 3, 16))

        response = client.get('/finance/ledger/hijri?hijri_year=1446&hijri_month=9', headers=operator_headers)

        assert response.status_code == 200
        data = response.get_json()
        assert data['start_date'].startswith('2025-03-01')
        assert [row['balance'] for row in data['transactions']] == [1_500_000, 1_300_000]
        assert data['stats']['previous_month_balance'] == 1_000_000
        assert data['stats']['closing_balance'] == 1_300_000

    def test_invalid_hijri_month(self, client, operator_headers):
        response = client.get('/finance/ledger/hijri?hijri_year=1446&hijri_month=13', headers=operator_headers)

        assert response.status_code == 400

    def test_today(self, client, operator_headers):
        data = client.get('/finance/hijri/today', headers=operator_headers).get_json()

        assert 1 <= data['hijri_month'] <= 12
        assert data['hijri_date'].endswith(str(data['hijri_year']))


class TestFuel:

    def test_purchase_total_is_rounded(self, client, operator_headers, create_car):
        car = create_car(name='Avanza', license_plate='B 7 AVZ')

        response = client.post('/fuel/purchases', json={
            'car_id': car.id, 'liter_amount': 12.5, 'price_per_liter': 10_000.4,
            'date': '2025-03-12T10:00:00',
        }, headers=operator_headers)

        assert response.status_code == 201
        data = response.get_json()
        assert data['type'] == 'FUEL_PURCHASE'
        assert data['amount'] == 125_005
        assert data['description'] == 'Pembelian BBM - Avanza (B 7 AVZ)'
        assert data['fuel_purchase']['car']['id'] == car.id

    def test_purchase_does_not_touch_cash_balance(self, client, operator_headers, create_car):
        car = create_car()
        client.post('/fuel/purchases', json={
            'car_id': car.id, 'liter_amount': 10, 'price_per_liter': 10_000, 'date': '2025-03-12T10:00:00',
        }, headers=operator_headers)

        assert client.get('/finance/balance', headers=operator_headers).get_json() == {'balance': 0}

    def test_unknown_car(self, client, operator_headers):
        response = client.post('/fuel/purchases', json={
            'car_id': 42, 'liter_amount': 10, 'price_per_liter': 10_000, 'date': '2025-03-12T10:00:00',
        }, headers=operator_headers)

        assert response.status_code == 404

    def test_fuel_income_description(self, client, operator_headers):
        response = client.post('/fuel/income', json={
            'amount': 1_000_000, 'source': 'Kas Yayasan', 'date': '2025-03-02T10:00:00',
        }, headers=operator_headers)

        assert response.status_code == 201
        assert response.get_json()['description'] == 'Dana BBM - Kas Yayasan'

    def test_monthly_report_groups_by_car(self, client, operator_headers, create_car):
        innova = create_car(name='Innova', license_plate='B 1 INN')
        avanza = create_car(name='Avanza', license_plate='B 2 AVZ')
        client.post('/fuel/income', json={
            'amount': 1_000_000, 'source': 'Kas', 'date': '2025-03-02T10:00:00',
        }, headers=operator_headers)
        for car, liters in ((innova, 10), (innova, 5), (avanza, 20)):
            client.post('/fuel/purchases', json={
                'car_id': car.id, 'liter_amount': liters, 'price_per_liter': 10_000,
                'date': '2025-03-12T10:00:00',
            }, headers=operator_headers)

        report = client.get('/fuel/report?hijri_year=1446&hijri_month=9', headers=operator_headers).get_json()

        assert report['hijri_month'] == 'Ramadhan'
        assert report['total_income'] == 1_000_000
        assert report['total_expense'] == 350_000
        assert report['balance'] == 650_000
        by_car = {row['car_name']: row for row in report['fuel_by_car']}
        assert by_car['Innova']['liter_amount'] == 15
        assert by_car['Avanza']['total_amount'] == 200_000

    def test_transactions_by_gregorian_month(self, client, operator_headers, create_transaction):
        create_transaction('FUEL_PURCHASE', 300, datetime(2025, 3, 2))
        create_transaction('EXPENSE', 300, datetime(2025, 3, 2))
        create_transaction('FUEL_PURCHASE', 300, datetime(2025, 4, 2))

        data = client.get('/fuel/transactions?year=2025&month=3', headers=operator_headers).get_json()

        assert [row['type'] for row in data] == ['FUEL_PURCHASE']

    @pytest.mark.parametrize('query, error', [
        ('year=2025&month=0', 'Bulan harus antara 1 dan 12'),
        ('year=2025&month=13', 'Bulan harus antara 1 dan 12'),
        ('hijri_year=1446&hijri_month=13', 'Bulan hijriah harus antara 1 dan 12'),
    ])
    def test_transactions_reject_month_out_of_range(self, client, operator_headers, query, error):
        response = client.get(f'/fuel/transactions?{query}', headers=operator_headers)

        assert response.status_code == 400
        assert response.get_json()['error'] == error
