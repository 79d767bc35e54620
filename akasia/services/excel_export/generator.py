from io import BytesIO
from openpyxl import Workbook

from akasia.services.balance_service import get_ledger
from akasia.services.excel_export.sheets.kas_sheet import KasSheet
from akasia.services.excel_export.sheets.spending_sheet import SpendingSheet
from akasia.services.reporting_service import get_spending_report
from akasia.utils.dates import HIJRI_MONTH_NAMES, hijri_month_range


class ExcelReportGenerator:
    sheet_generators = []

    def __init__(self):
        self.wb = Workbook()
        self.wb.remove(self.wb.active)  # Remove default sheet

    def get_report_data(self) -> dict:
        raise NotImplementedError

    def generate_report(self) -> BytesIO:
        """
        Fetch the report data once, run every sheet generator and return the workbook bytes.
        """
        report_data = self.get_report_data()

        for sheet_class in self.sheet_generators:
            sheet_instance = sheet_class(self.wb, report_data)
            sheet_instance.generate()

        excel_file = BytesIO()
        self.wb.save(excel_file)
        excel_file.seek(0)

        return excel_file


class LedgerReportGenerator(ExcelReportGenerator):
    sheet_generators = [KasSheet]

    def __init__(self, hijri_year: int, hijri_month: int):
        super().__init__()
        self.hijri_year = hijri_year
        self.hijri_month = hijri_month

    @property
    def filename(self):
        return f"Kas_{self.hijri_year}_{self.hijri_month:02d}.xlsx"

    def get_report_data(self) -> dict:
        start, end = hijri_month_range(self.hijri_year, self.hijri_month)
        month_name = HIJRI_MONTH_NAMES[self.hijri_month]
        return {
            'title': f"Kas {month_name} {self.hijri_year} ({start:%d/%m/%Y} - {end:%d/%m/%Y})",
            'ledger': get_ledger(start, end),
        }


class SpendingReportGenerator(ExcelReportGenerator):
    sheet_generators = [SpendingSheet]

    def __init__(self, year: int, month: int):
        super().__init__()
        self.year = year
        self.month = month

    @property
    def filename(self):
        return f"Anggaran_{self.year}_{self.month:02d}.xlsx"

    def get_report_data(self) -> dict:
        return {'report': get_spending_report(self.year, self.month)}
