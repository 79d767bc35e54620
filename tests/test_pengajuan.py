import pytest
from sqlalchemy.exc import SQLAlchemyError

from akasia.extensions import db
from akasia.models.pengajuan import Pengajuan, PengajuanItem


@pytest.fixture
def pengajuan_id(client, operator_headers, create_car):
    car = create_car()
    response = client.post('/pengajuan', json={
        'notes': 'Servis rutin',
        'items': [
            {'requirement': 'Ganti oli', 'estimation': 350_000, 'car_id': car.id},
            {'requirement': 'Ban depan', 'estimation': 900_000, 'car_id': car.id,
             'image_url': 'http://storage.test/storage/v1/object/public/akasia/pengajuan/ban.webp'},
        ],
    }, headers=operator_headers)
    assert response.status_code == 201
    return response.get_json()['id']


class TestCreatePengajuan:

    def test_create_with_items(self, client, operator_headers, pengajuan_id):
        response = client.get('/pengajuan', headers=operator_headers)

        data = response.get_json()
        assert len(data) == 1
        assert data[0]['status'] == 'PENDING'
        assert data[0]['total_estimation'] == 1_250_000
        assert data[0]['items'][1]['image_url'].endswith('/pengajuan/ban.webp')

    def test_requires_at_least_one_item(self, client, operator_headers):
        response = client.post('/pengajuan', json={'items': []}, headers=operator_headers)

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Minimal satu item'
        assert Pengajuan.query.count() == 0

    def test_item_requirement_must_not_be_blank(self, client, operator_headers, create_car):
        car = create_car()

        response = client.post('/pengajuan', json={
            'items': [{'requirement': '   ', 'estimation': 1000, 'car_id': car.id}],
        }, headers=operator_headers)

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Kebutuhan wajib diisi'

    def test_unknown_car(self, client, operator_headers):
        response = client.post('/pengajuan', json={
            'items': [{'requirement': 'Ganti oli', 'estimation': 1000, 'car_id': 99}],
        }, headers=operator_headers)

        assert response.status_code == 404
        assert PengajuanItem.query.count() == 0


class TestDecidePengajuan:

    def test_approve(self, client, operator_headers, pengajuan_id):
        response = client.post(f'/pengajuan/{pengajuan_id}/approve', headers=operator_headers)

        assert response.status_code == 200
        assert response.get_json()['status'] == 'APPROVED'

    def test_reject_keeps_reason(self, client, operator_headers, pengajuan_id):
        response = client.post(f'/pengajuan/{pengajuan_id}/reject', json={'reason': 'Anggaran habis'},
                               headers=operator_headers)

        assert response.status_code == 200
        assert response.get_json()['status'] == 'REJECTED'
        assert response.get_json()['notes'] == 'Anggaran habis'

    def test_reject_requires_reason(self, client, operator_headers, pengajuan_id):
        response = client.post(f'/pengajuan/{pengajuan_id}/reject', json={}, headers=operator_headers)

        assert response.status_code == 400
        assert Pengajuan.query.one().status == 'PENDING'

    @pytest.mark.parametrize('first, second', [
        ('approve', 'reject'),
        ('reject', 'approve'),
        ('approve', 'approve'),
    ])
    def test_decision_is_final(self, client, operator_headers, pengajuan_id, first, second):
        body = {'reason': 'Tidak perlu'}
        client.post(f'/pengajuan/{pengajuan_id}/{first}', json=body, headers=operator_headers)

        response = client.post(f'/pengajuan/{pengajuan_id}/{second}', json=body, headers=operator_headers)

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Pengajuan sudah diproses'

    def test_filter_by_status(self, client, operator_headers, pengajuan_id):
        client.post(f'/pengajuan/{pengajuan_id}/approve', headers=operator_headers)

        assert client.get('/pengajuan?status=PENDING', headers=operator_headers).get_json() == []
        assert len(client.get('/pengajuan?status=APPROVED', headers=operator_headers).get_json()) == 1

    def test_filter_rejects_unknown_status(self, client, operator_headers):
        response = client.get('/pengajuan?status=DONE', headers=operator_headers)

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Status tidak valid'

    def test_failed_decision_is_rolled_back(self, client, operator_headers, pengajuan_id, monkeypatch):
        def failing_commit():
            raise SQLAlchemyError('database unavailable')

        monkeypatch.setattr(db.session, 'commit', failing_commit)
        response = client.post(f'/pengajuan/{pengajuan_id}/approve', headers=operator_headers)

        assert response.status_code == 500
        assert response.get_json()['error'] == 'Gagal memproses pengajuan'
        assert db.session.get(Pengajuan, pengajuan_id).status == 'PENDING'
