from typing import Annotated, Optional

from akasia.schemas.common import (
    NaiveDatetime, OptionalText, RequestSchema, min_length, not_empty_list, positive
)


class IncomeSchema(RequestSchema):
    amount: Annotated[int, positive('Amount must be a positive number')]
    source: Annotated[str, min_length(1, 'Source is required')]
    date: NaiveDatetime
    notes: OptionalText = None


class ExpenseItemSchema(RequestSchema):
    description: Annotated[str, min_length(1, 'Description is required')]
    quantity: Annotated[int, positive('Quantity must be positive')]
    unit_price: Annotated[int, positive('Unit price must be positive')]
    car_id: Optional[int] = None

    @property
    def total(self):
        return self.quantity * self.unit_price


class ExpenseSchema(RequestSchema):
    date: NaiveDatetime
    description: Annotated[str, min_length(1, 'Description is required')]
    items: Annotated[list[ExpenseItemSchema], not_empty_list('At least one item is required')]
    notes: OptionalText = None

    @property
    def total_amount(self):
        return sum(item.total for item in self.items)
