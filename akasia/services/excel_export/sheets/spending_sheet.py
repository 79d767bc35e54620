from akasia.services.excel_export.base_sheet import BaseSheet
from akasia.services.excel_export.utils.excel_utils import (
    BOLD_RED_FONT, HEADER_FONT, LIGHT_RED_FILL,
    auto_fit_columns, write_currency, write_header_row, write_title, write_totals_row
)

# First column holding a rupiah amount
AMOUNT_START_COLUMN = 5


class SpendingSheet(BaseSheet):
    HEADERS = [
        'Judul', 'Dibuat Oleh', 'Status', 'Sumber Dana', 'Dana', 'Total Nota',
        'Selisih', 'Pengembalian', 'Penggantian'
    ]

    def __init__(self, workbook, data, sheet_name='Anggaran'):
        super().__init__(workbook, sheet_name, data)

    def generate(self):
        period = self.data['report']['period']
        write_title(self.ws, f"Laporan Anggaran {period['month']:02d}/{period['year']}", len(self.HEADERS))
        write_header_row(self.ws, 3, self.HEADERS)

        current_row = 4
        for task in self.data['report']['tasks']:
            self._write_task(current_row, task)
            current_row += 1

        totals = self.data['report']['totals']
        write_totals_row(self.ws, current_row, 1, {
            5: totals['total_funding'],
            6: totals['total_receipts'],
            8: totals['total_refund_due'],
            9: totals['total_reimburse_due'],
        })

        self._write_unfunded(current_row + 2)
        auto_fit_columns(self.ws)

    def _write_task(self, row, task):
        labels = [task['title'], task['created_by'], task['status_label'], task['funding']['source']]
        amounts = [
            task['funding']['amount'],
            task['receipts_total'],
            task['diff'],
            task['refund_due'],
            task['reimburse_due'],
        ]
        for col, value in enumerate(labels, 1):
            self.ws.cell(row=row, column=col, value=value)
        for col, amount in enumerate(amounts, AMOUNT_START_COLUMN):
            write_currency(self.ws, row, col, amount)

        # Overspent: the diff column goes red
        if task['diff'] < 0:
            self.ws.cell(row=row, column=7).font = BOLD_RED_FONT

    def _write_unfunded(self, row):
        unfunded = self.data['report']['unfunded_tasks']
        if not unfunded:
            return

        cell = self.ws.cell(row=row, column=1, value='Belum Didanai')
        cell.font = HEADER_FONT
        cell.fill = LIGHT_RED_FILL
        for offset, task in enumerate(unfunded, 1):
            self.ws.cell(row=row + offset, column=1, value=task['title'])
            self.ws.cell(row=row + offset, column=2, value=task['created_by'])
