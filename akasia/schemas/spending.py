from typing import Annotated, Literal, Optional

from pydantic import HttpUrl

from akasia.schemas.common import (
    NaiveDatetime, OptionalText, RequestSchema, at_least, min_length, not_empty_list, positive
)


class TaskSchema(RequestSchema):
    title: Annotated[str, min_length(3, 'Judul minimal 3 karakter')]
    description: OptionalText = None


class FundingSchema(RequestSchema):
    amount: Annotated[int, positive('Jumlah harus lebih dari 0')]
    received_at: Optional[NaiveDatetime] = None
    source: OptionalText = None
    notes: OptionalText = None


class ReceiptItemSchema(RequestSchema):
    description: Annotated[str, min_length(1, 'Deskripsi wajib diisi')]
    quantity: Annotated[int, at_least(1, 'Qty minimal 1')]
    unit_price: Annotated[int, at_least(0, 'Harga minimal 0')]

    @property
    def total(self):
        return self.quantity * self.unit_price


class ReceiptSchema(RequestSchema):
    vendor: OptionalText = None
    receipt_no: OptionalText = None
    receipt_date: Optional[NaiveDatetime] = None
    notes: OptionalText = None
    total_amount: Annotated[int, positive('Total wajib diisi')]
    items: Annotated[list[ReceiptItemSchema], not_empty_list('Minimal 1 item')]

    @property
    def items_total(self):
        return sum(item.total for item in self.items)


class SettlementSchema(RequestSchema):
    notes: OptionalText = None


class CashbackSchema(RequestSchema):
    amount: Annotated[int, positive('Jumlah wajib diisi')]
    vendor: OptionalText = None
    notes: OptionalText = None
    occurred_at: Optional[NaiveDatetime] = None


class WalletEntrySchema(RequestSchema):
    type: Literal['CREDIT', 'DEBIT']
    amount: Annotated[int, positive('Jumlah wajib diisi')]
    description: OptionalText = None
    occurred_at: Optional[NaiveDatetime] = None
    attachment_url: Optional[HttpUrl] = None
