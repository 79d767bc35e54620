from typing import Annotated

from akasia.schemas.common import NaiveDatetime, OptionalText, RequestSchema, min_length


class CarSchema(RequestSchema):
    name: Annotated[str, min_length(1, 'Nama mobil wajib diisi')]
    license_plate: Annotated[str, min_length(1, 'Plat nomor wajib diisi')]
    barcode_string: OptionalText = None


class StartUsageSchema(RequestSchema):
    car_id: int
    purpose: Annotated[str, min_length(1, 'Tujuan penggunaan wajib diisi')]
    destination: Annotated[str, min_length(1, 'Tempat tujuan wajib diisi')]
    start_time: NaiveDatetime


class EndUsageSchema(RequestSchema):
    end_time: NaiveDatetime
