class ApprovalError(Exception):
    pass


def decide(record, status: str, notes=None):
    """Move a PENDING pengajuan/perizinan to APPROVED or REJECTED; both are final."""
    if record.status != 'PENDING':
        raise ApprovalError(f'{record.__class__.__name__} sudah diproses')
    record.status = status
    if notes is not None:
        record.notes = notes
    return record
