from akasia.services.excel_export.base_sheet import BaseSheet
from akasia.services.excel_export.utils.excel_utils import (
    DATE_FORMAT, HEADER_FONT, LIGHT_GREEN_FILL, THIN_BORDER,
    set_column_widths, write_currency, write_header_row, write_title, write_totals_row
)
from akasia.utils.dates import format_hijri_date


class KasSheet(BaseSheet):
    """Cash book for one period: opening balance, every movement, running balance."""

    HEADERS = ['Tanggal', 'Tanggal Hijriah', 'Keterangan', 'Uang Masuk', 'Uang Keluar', 'Sisa Saldo']

    def __init__(self, workbook, data, sheet_name='Kas'):
        super().__init__(workbook, sheet_name, data)

    def generate(self):
        write_title(self.ws, self.data['title'], len(self.HEADERS))
        write_header_row(self.ws, 3, self.HEADERS)
        last_row = self._write_data()

        stats = self.data['ledger']['stats']
        write_totals_row(self.ws, last_row + 1, 3, {
            4: stats['total_income'],
            5: stats['total_expense'],
            6: stats['closing_balance'],
        }, fill=LIGHT_GREEN_FILL)

        set_column_widths(self.ws, {'A': 12, 'B': 16, 'C': 45, 'D': 16, 'E': 16, 'F': 16})

    def _write_data(self):
        ledger = self.data['ledger']
        current_row = 4

        self.ws.cell(row=current_row, column=3, value='Saldo Awal').font = HEADER_FONT
        write_currency(self.ws, current_row, 6, ledger['stats']['opening_balance'])

        for row in ledger['rows']:
            current_row += 1
            trx = row['transaction']

            self.ws.cell(row=current_row, column=1, value=trx.date).number_format = DATE_FORMAT
            self.ws.cell(row=current_row, column=2, value=format_hijri_date(trx.date))
            self.ws.cell(row=current_row, column=3, value=trx.description)

            amount_column = 4 if trx.type == 'INCOME' else 5
            write_currency(self.ws, current_row, amount_column, trx.amount)
            write_currency(self.ws, current_row, 6, row['balance'])

            for col in range(1, len(self.HEADERS) + 1):
                self.ws.cell(row=current_row, column=col).border = THIN_BORDER

        return current_row
