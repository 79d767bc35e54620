from typing import Annotated, Literal, Optional

from pydantic import AfterValidator

from akasia.schemas.common import RequestSchema, min_length, optional_text

Role = Literal['ADMIN', 'USER', 'DRIVER']


def _email(value: Optional[str]) -> Optional[str]:
    value = optional_text(value)
    if value is not None and ('@' not in value or value.startswith('@') or value.endswith('@')):
        raise ValueError('Format email tidak valid')
    return value


Email = Annotated[Optional[str], AfterValidator(_email)]


class LoginSchema(RequestSchema):
    username: Annotated[str, min_length(1, 'Username is required')]
    password: Annotated[str, min_length(1, 'Password is required')]


class CreateUserSchema(RequestSchema):
    name: Annotated[str, min_length(1, 'Nama wajib diisi')]
    username: Annotated[str, min_length(3, 'Username minimal 3 karakter')]
    email: Email = None
    password: Annotated[str, min_length(6, 'Password minimal 6 karakter')]
    role: Role = 'USER'


class UpdateUserSchema(RequestSchema):
    name: Annotated[str, min_length(1, 'Nama wajib diisi')]
    username: Annotated[str, min_length(3, 'Username minimal 3 karakter')]
    email: Email = None
    role: Role
    is_active: bool


class ChangePasswordSchema(RequestSchema):
    new_password: Annotated[str, min_length(6, 'Password minimal 6 karakter')]
