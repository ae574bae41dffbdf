from .creditor import Creditor
from .credit_transaction import CreditTransaction

__all__ = ["Creditor", "CreditTransaction"]
