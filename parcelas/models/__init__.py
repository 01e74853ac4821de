from .base import Base
from .purchase import Installment, Purchase

__all__ = [
    "Base",
    "Purchase",
    "Installment",
]
