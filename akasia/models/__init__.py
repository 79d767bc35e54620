from akasia.models.user import User
from akasia.models.car import Car, UsageRecord
from akasia.models.transaction import Transaction, Income, Expense, ExpenseItem
from akasia.models.fuel_purchase import FuelPurchase
from akasia.models.tax import Tax, TaxPayment
from akasia.models.spending import (
    SpendingTask, TaskFunding, Receipt, ReceiptItem, ReceiptAttachment, TaskSettlement, Cashback
)
from akasia.models.wallet import Wallet, WalletEntry
from akasia.models.pengajuan import Pengajuan, PengajuanItem
from akasia.models.perizinan import Perizinan, PerizinanToken
