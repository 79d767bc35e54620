import json

from pydantic import ValidationError


def first_error_message(exc: ValidationError) -> str:
    """Turn the first pydantic error into a single user-facing message."""
    error = exc.errors()[0]
    ctx_error = (error.get('ctx') or {}).get('error')
    if ctx_error is not None:
        return str(ctx_error)
    if error['type'] == 'missing':
        field = '.'.join(str(part) for part in error['loc'])
        return f'Missing required field: {field}'
    return error['msg']


def validate_payload(schema, data):
    """Validate ``data`` against ``schema``; returns ``(model, None)`` or ``(None, message)``."""
    try:
        return schema.model_validate(data or {}), None
    except ValidationError as exc:
        return None, first_error_message(exc)


def request_payload(request):
    """
    JSON body of a request. Multipart requests carry their JSON in a
    ``payload`` form field next to the uploaded files.
    """
    if request.mimetype == 'multipart/form-data':
        raw = request.form.get('payload')
        if not raw:
            return {}
        try:
            return json.loads(raw)
        except ValueError:
            return None
    return request.get_json(silent=True)
