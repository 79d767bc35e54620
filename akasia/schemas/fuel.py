from typing import Annotated

from akasia.schemas.common import NaiveDatetime, OptionalText, RequestSchema, min_length, positive


class FuelPurchaseSchema(RequestSchema):
    car_id: int
    liter_amount: Annotated[float, positive('Liter amount must be positive')]
    price_per_liter: Annotated[float, positive('Price per liter must be positive')]
    date: NaiveDatetime
    notes: OptionalText = None


class FuelIncomeSchema(RequestSchema):
    amount: Annotated[int, positive('Amount must be positive')]
    source: Annotated[str, min_length(1, 'Source is required')]
    date: NaiveDatetime
    notes: OptionalText = None
