"""
Domain Models Package
"""

from .instrument import Instrument
from .basket import Basket, WEIGHT_SUM_TOLERANCE

__all__ = [
    "Basket",
    "Instrument",
    "WEIGHT_SUM_TOLERANCE",
]
