from datetime import date
from typing import Annotated, Literal

from akasia.schemas.common import OptionalText, RequestSchema, positive

TaxType = Literal['ANNUAL', 'FIVE_YEAR']


class CreateTaxSchema(RequestSchema):
    car_id: int
    type: TaxType
    due_date: date
    notes: OptionalText = None


class UpdateTaxSchema(RequestSchema):
    type: TaxType
    due_date: date
    notes: OptionalText = None


class PayTaxSchema(RequestSchema):
    amount: Annotated[int, positive('Amount must be positive')]
    notes: OptionalText = None
