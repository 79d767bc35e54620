from datetime import date, datetime
from io import BytesIO

from openpyxl import load_workbook

from akasia.models.car import Car


def csv_upload(text, filename='cars.csv'):
    return {'file': (BytesIO(text.encode('utf-8')), filename)}


class TestCarImport:

    def test_import_creates_cars_and_reports_duplicates(self, client, admin_headers, create_car):
        create_car(license_plate='B 1 AAA')
        content = (
            "Name,License Plate,Barcode String\n"
            "Innova,B 2 BBB,\n"
            "Avanza,B 1 AAA,\n"
            "Elf,,\n"
            "Hiace,B 3 CCC,HIACE-01\n"
        )

        response = client.post('/admin/tools/import-cars', data=csv_upload(content),
                               headers=admin_headers, content_type='multipart/form-data')

        assert response.status_code == 200
        summary = response.get_json()
        assert summary['status'] == 'Completed with errors'
        assert summary['success_count'] == 2
        assert summary['failure_count'] == 2
        assert summary['created'] == ['B 2 BBB', 'B 3 CCC']
        assert summary['failures'] == [
            {'row_number': 3, 'error_message': 'Plat nomor sudah terdaftar'},
            {'row_number': 4, 'error_message': 'Nama mobil dan plat nomor wajib diisi'},
        ]
        assert Car.query.count() == 3
        assert Car.query.filter_by(license_plate='B 2 BBB').one().barcode_string == 'B-2-BBB'
        assert Car.query.filter_by(license_plate='B 3 CCC').one().barcode_string == 'HIACE-01'

    def test_failed_rows_as_csv(self, client, admin_headers, create_car):
        create_car(license_plate='B 1 AAA')

        response = client.post('/admin/tools/import-cars?format=csv',
                               data=csv_upload("name,license_plate\nAvanza,B 1 AAA\n"),
                               headers=admin_headers, content_type='multipart/form-data')

        assert response.status_code == 200
        assert response.mimetype == 'text/csv'
        lines = response.get_data(as_text=True).splitlines()
        assert lines[0] == 'Row,name,license_plate,Error Message'
        assert lines[1] == '2,Avanza,B 1 AAA,Plat nomor sudah terdaftar'

    def test_missing_required_column(self, client, admin_headers):
        response = client.post('/admin/tools/import-cars', data=csv_upload("name\nInnova\n"),
                               headers=admin_headers, content_type='multipart/form-data')

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Missing required columns: license_plate'

    def test_unsupported_file_type(self, client, admin_headers):
        response = client.post('/admin/tools/import-cars', data=csv_upload("x", filename='cars.txt'),
                               headers=admin_headers, content_type='multipart/form-data')

        assert response.status_code == 400

    def test_admin_only(self, client, operator_headers):
        response = client.post('/admin/tools/import-cars', data=csv_upload("name,license_plate\n"),
                               headers=operator_headers, content_type='multipart/form-data')

        assert response.status_code == 403


class TestExcelExport:

    def test_ledger_workbook(self, client, operator_headers, create_transaction):
        create_transaction('INCOME', 1_000_000, datetime(2025, 2, 10), description='Saldo lama')
        create_transaction('INCOME', 500_000, datetime(2025, 3, 10), description='Donasi')
        create_transaction('EXPENSE', 200_000, datetime(2025, 3, 15), description='Servis')

        response = client.get('/export/ledger?hijri_year=1446&hijri_month=9', headers=operator_headers)

        assert response.status_code == 200
        assert 'Kas_1446_09.xlsx' in response.headers['Content-Disposition']
        sheet = load_workbook(BytesIO(response.data))['Kas']
        assert sheet['A3'].value == 'Tanggal'
        assert sheet['F4'].value == 1_000_000
        assert sheet['C5'].value == 'Donasi'
        assert sheet['D5'].value == 500_000
        assert sheet['E6'].value == 200_000
        assert sheet['F6'].value == 1_300_000
        assert sheet['C7'].value == 'Total'
        assert sheet['F7'].value == 1_300_000

    def test_spending_workbook(self, client, operator_headers, create_task):
        create_task(title='Belanja dapur', funding_amount=300_000)
        create_task(title='Belum ada dana')
        today = date.today()

        response = client.get(f'/export/spending?year={today.year}&month={today.month}',
                              headers=operator_headers)

        assert response.status_code == 200
        sheet = load_workbook(BytesIO(response.data))['Anggaran']
        values = [cell.value for cell in sheet['A']]
        assert 'Belanja dapur' in values
        assert 'Belum Didanai' in values
        assert values.index('Belum ada dana') > values.index('Belum Didanai')

    def test_invalid_month(self, client, operator_headers):
        response = client.get('/export/spending?year=2025&month=13', headers=operator_headers)

        assert response.status_code == 400
