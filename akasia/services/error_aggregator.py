import csv
import io


class ErrorAggregator:
    """Collects per-row outcomes of a spreadsheet import."""

    def __init__(self):
        self.failed_rows = []
        self.created = []
        self.success_count = 0
        self.total_rows_processed = 0

    def add_failure(self, row_number, row_data, error_message):
        self.failed_rows.append({
            'row_number': row_number,
            'row_data': row_data,
            'error_message': error_message
        })
        self.total_rows_processed += 1

    def add_success(self, label=None):
        if label is not None:
            self.created.append(label)
        self.success_count += 1
        self.total_rows_processed += 1

    @property
    def failure_count(self):
        return len(self.failed_rows)

    @property
    def has_failures(self):
        return self.failure_count > 0

    def get_summary_dict(self):
        status = "Completed with errors" if self.has_failures else "Completed successfully"
        return {
            'status': status,
            'total_rows_processed': self.total_rows_processed,
            'success_count': self.success_count,
            'failure_count': self.failure_count,
            'created': list(self.created),
            'failures': [
                {'row_number': failure['row_number'], 'error_message': failure['error_message']}
                for failure in self.failed_rows
            ],
        }

    def generate_error_csv_string(self):
        if not self.has_failures:
            return None

        output = io.StringIO()
        headers = ['Row'] + list(self.failed_rows[0]['row_data'].keys()) + ['Error Message']
        writer = csv.DictWriter(output, fieldnames=headers, extrasaction='ignore')
        writer.writeheader()

        for failure in self.failed_rows:
            row_to_write = dict(failure['row_data'])
            row_to_write['Row'] = failure['row_number']
            row_to_write['Error Message'] = failure['error_message']
            writer.writerow(row_to_write)

        return output.getvalue()
