import uuid
from datetime import datetime, timedelta

from akasia.extensions import db
from akasia.models.perizinan import PerizinanToken

DEFAULT_FORM_TOKEN_DAYS = 7
DEFAULT_APPROVAL_TOKEN_HOURS = 48


class TokenError(Exception):
    pass


def issue_token(token_type: str, expires_in: timedelta, perizinan=None) -> PerizinanToken:
    """Create a single-use bearer token; the caller commits."""
    token = PerizinanToken(
        token=str(uuid.uuid4()),
        type=token_type,
        perizinan=perizinan,
        expires_at=datetime.utcnow() + expires_in,
    )
    db.session.add(token)
    return token


def issue_form_token(expiration_days=DEFAULT_FORM_TOKEN_DAYS) -> PerizinanToken:
    return issue_token('FORM', timedelta(days=expiration_days))


def issue_approval_token(perizinan, expiration_hours=DEFAULT_APPROVAL_TOKEN_HOURS) -> PerizinanToken:
    if perizinan.status != 'PENDING':
        raise TokenError('Perizinan sudah diproses')
    return issue_token('APPROVE', timedelta(hours=expiration_hours), perizinan=perizinan)


def validate_token(value: str, expected_type=None) -> PerizinanToken:
    """Return the token if it can still be redeemed, otherwise raise ``TokenError``."""
    token = PerizinanToken.query.filter_by(token=value).first()

    if token is None:
        raise TokenError('Link tidak valid')
    if token.expires_at < datetime.utcnow():
        raise TokenError('Link sudah kadaluarsa')
    if token.used_at is not None:
        raise TokenError('Link sudah digunakan')
    if expected_type == 'FORM' and token.type != 'FORM':
        raise TokenError('Token tidak valid untuk form')
    if expected_type == 'APPROVE' and token.type != 'APPROVE':
        raise TokenError('Token tidak valid untuk approval')

    return token


def consume_token(token: PerizinanToken, perizinan=None):
    token.used_at = datetime.utcnow()
    if perizinan is not None:
        token.perizinan = perizinan


def active_tokens():
    return (
        PerizinanToken.query
        .filter(PerizinanToken.expires_at >= datetime.utcnow(), PerizinanToken.used_at.is_(None))
        .order_by(PerizinanToken.created_at.desc())
        .all()
    )
