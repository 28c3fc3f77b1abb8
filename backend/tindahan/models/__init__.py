from .inventory import InventoryItem
from .sales import SaleTransaction, SaleLine
from .customers import Customer, LedgerTransaction, CreditLine, PaymentAllocation
from .documents import Counter
from .wallet import WalletEntry
from .receipts import ExpenseReceipt

__all__ = [
    'InventoryItem',
    'SaleTransaction', 'SaleLine',
    'Customer', 'LedgerTransaction', 'CreditLine', 'PaymentAllocation',
    'Counter',
    'WalletEntry',
    'ExpenseReceipt',
]
