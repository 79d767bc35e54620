from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

# ======================================================================================
# STYLES
# ======================================================================================
TITLE_FONT = Font(bold=True, size=14)
HEADER_FONT = Font(bold=True)
BOLD_RED_FONT = Font(bold=True, color='FF0000')

HEADER_FILL = PatternFill(start_color='CCCCCC', end_color='CCCCCC', fill_type='solid')
LIGHT_RED_FILL = PatternFill(start_color='F4CCCC', end_color='F4CCCC', fill_type='solid')
LIGHT_GREEN_FILL = PatternFill(start_color='C6EFCE', end_color='C6EFCE', fill_type='solid')

CENTER_ALIGN = Alignment(horizontal='center', vertical='center')

THIN_BORDER = Border(
    left=Side(style='thin'),
    right=Side(style='thin'),
    top=Side(style='thin'),
    bottom=Side(style='thin')
)

# Rupiah amounts are whole numbers
CURRENCY_FORMAT = '"Rp" #,##0'
DATE_FORMAT = 'DD/MM/YYYY'


# ======================================================================================
# HELPER FUNCTIONS
# ======================================================================================
def write_title(ws, title: str, last_column: int):
    ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=last_column)
    cell = ws.cell(row=1, column=1, value=title)
    cell.font = TITLE_FONT
    cell.alignment = CENTER_ALIGN


def write_header_row(ws, row: int, headers: list):
    for col, header in enumerate(headers, 1):
        cell = ws.cell(row=row, column=col, value=header)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = CENTER_ALIGN
        cell.border = THIN_BORDER


def write_currency(ws, row: int, column: int, value):
    cell = ws.cell(row=row, column=column, value=value)
    cell.number_format = CURRENCY_FORMAT
    return cell


def write_totals_row(ws, row: int, label_column: int, amounts: dict, fill=None):
    """
    Writes a bold ``Total`` label followed by currency cells.
    :param amounts: column number -> amount
    """
    label = ws.cell(row=row, column=label_column, value='Total')
    label.font = HEADER_FONT
    cells = [label]
    for column, amount in amounts.items():
        cell = write_currency(ws, row, column, amount)
        cell.font = HEADER_FONT
        cells.append(cell)
    if fill is not None:
        for cell in cells:
            cell.fill = fill


def set_column_widths(ws, widths: dict):
    """
    Sets the width for specified columns.
    :param ws: The worksheet object.
    :param widths: A dictionary mapping column letters to widths.
    """
    for col, width in widths.items():
        ws.column_dimensions[col].width = width


def auto_fit_columns(ws, min_width=10):
    """
    Sizes every column to its longest value. Merged title cells are skipped.
    """
    for col in ws.iter_cols(min_row=2):
        longest = max((len(str(cell.value)) for cell in col if cell.value is not None), default=0)
        ws.column_dimensions[get_column_letter(col[0].column)].width = max(longest + 2, min_width)
