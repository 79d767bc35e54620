from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from akasia.extensions import db
from akasia.models.car import Car, UsageRecord


class TestCarRegistry:

    def test_barcode_defaults_to_plate(self, client, operator_headers):
        response = client.post('/cars', json={'name': 'Toyota Avanza', 'license_plate': 'B 9012 DEF'},
                               headers=operator_headers)

        assert response.status_code == 201
        assert response.get_json()['barcode_string'] == 'B-9012-DEF'

    def test_duplicate_plate_creates_no_row(self, client, operator_headers, create_car):
        create_car(license_plate='B 1234 XYZ')

        response = client.post('/cars', json={'name': 'Another', 'license_plate': 'B 1234 XYZ'},
                               headers=operator_headers)

        assert response.status_code == 409
        assert 'error' in response.get_json()
        assert Car.query.count() == 1

    def test_missing_name_is_rejected(self, client, operator_headers):
        response = client.post('/cars', json={'name': '  ', 'license_plate': 'B 1 A'}, headers=operator_headers)

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Nama mobil wajib diisi'

    def test_soft_deleted_car_is_hidden(self, client, operator_headers, create_car):
        car = create_car()

        assert client.delete(f'/cars/{car.id}', headers=operator_headers).status_code == 200
        assert client.get('/cars', headers=operator_headers).get_json() == []
        assert client.get(f'/cars/{car.id}', headers=operator_headers).status_code == 404
        assert db.session.get(Car, car.id).deleted_at is not None

    def test_failed_delete_keeps_car(self, client, operator_headers, create_car, monkeypatch):
        car_id = create_car().id

        def failing_commit():
            raise SQLAlchemyError('database unavailable')

        monkeypatch.setattr(db.session, 'commit', failing_commit)
        response = client.delete(f'/cars/{car_id}', headers=operator_headers)

        assert response.status_code == 500
        assert response.get_json()['error'] == 'Gagal menghapus mobil'
        assert db.session.get(Car, car_id).deleted_at is None

    def test_list_includes_counts(self, client, operator_headers, create_car):
        create_car()

        cars = client.get('/cars', headers=operator_headers).get_json()
        assert cars[0]['counts'] == {'usage_records': 0, 'fuel_purchases': 0, 'taxes': 0}
        assert cars[0]['latest_usage'] is None


class TestCarUsage:

    def start(self, client, headers, car, when=None):
        return client.post('/usage/start', json={
            'car_id': car.id,
            'purpose': 'Antar barang',
            'destination': 'Bandung',
            'start_time': (when or datetime(2025, 3, 1, 8, 0)).isoformat(),
        }, headers=headers)

    def test_start_marks_car_in_use(self, client, operator_headers, create_car):
        car = create_car()

        response = self.start(client, operator_headers, car)

        assert response.status_code == 201
        assert response.get_json()['car_status'] == 'IN_USE'
        status = client.get('/usage/me', headers=operator_headers).get_json()
        assert status['is_driving'] is True

    def test_user_drives_one_car_at_a_time(self, client, operator_headers, create_car):
        first = create_car(name='Innova', license_plate='B 1 AA')
        second = create_car(name='Avanza', license_plate='B 2 BB')
        self.start(client, operator_headers, first)

        response = self.start(client, operator_headers, second)

        assert response.status_code == 400
        assert response.get_json()['error'].startswith('Anda masih mengendarai Innova')

    def test_car_in_use_is_unavailable(self, client, operator_headers, driver, auth_headers, create_car):
        car = create_car(name='Innova')
        self.start(client, operator_headers, car)

        response = self.start(client, auth_headers(driver), car)

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Kendaraan Innova sedang tidak tersedia'

    def test_end_usage_frees_car_once(self, client, operator_headers, create_car):
        car = create_car()
        usage_id = self.start(client, operator_headers, car).get_json()['id']

        end = client.post(f'/usage/{usage_id}/end', json={'end_time': '2025-03-01T17:00:00'},
                          headers=operator_headers)
        assert end.status_code == 200
        assert db.session.get(Car, car.id).status == 'AVAILABLE'

        again = client.post(f'/usage/{usage_id}/end', json={'end_time': '2025-03-01T18:00:00'},
                            headers=operator_headers)
        assert again.status_code == 400
        assert again.get_json()['error'] == 'Penggunaan sudah selesai'
        assert db.session.get(UsageRecord, usage_id).end_time == datetime(2025, 3, 1, 17, 0)
