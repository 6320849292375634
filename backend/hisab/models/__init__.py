from hisab.models.customer import Customer
from hisab.models.preference import Preference
from hisab.models.product import Product
from hisab.models.transaction import Transaction, TransactionLine

__all__ = ["Customer", "Preference", "Product", "Transaction", "TransactionLine"]
