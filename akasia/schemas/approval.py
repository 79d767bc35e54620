from typing import Annotated, Optional

from pydantic import HttpUrl

from akasia.schemas.common import (
    NaiveDatetime, OptionalText, RequestSchema, min_length, not_empty_list, positive
)


class PengajuanItemSchema(RequestSchema):
    requirement: Annotated[str, min_length(1, 'Kebutuhan wajib diisi')]
    estimation: Annotated[int, positive('Estimasi biaya wajib diisi')]
    car_id: int
    image_url: Optional[HttpUrl] = None


class PengajuanSchema(RequestSchema):
    notes: OptionalText = None
    items: Annotated[list[PengajuanItemSchema], not_empty_list('Minimal satu item')]


class RejectPengajuanSchema(RequestSchema):
    reason: Annotated[str, min_length(1, 'Alasan penolakan wajib diisi')]


class PerizinanSchema(RequestSchema):
    car_id: int
    name: Annotated[str, min_length(1, 'Nama pemohon wajib diisi')]
    purpose: Annotated[str, min_length(1, 'Keperluan wajib diisi')]
    destination: Annotated[str, min_length(1, 'Tujuan wajib diisi')]
    description: OptionalText = None
    number_of_passengers: Annotated[int, positive('Jumlah penumpang wajib diisi')]
    date: NaiveDatetime
    estimation: Annotated[int, positive('Estimasi biaya wajib diisi')]


class FormTokenSchema(RequestSchema):
    expiration_days: Annotated[int, positive('Masa berlaku minimal 1 hari')] = 7


class ApprovalTokenSchema(RequestSchema):
    expiration_hours: Annotated[int, positive('Masa berlaku minimal 1 jam')] = 48
