"""
Portfolio Profit
Realized and annualized profit for a weighted basket of equities.
"""

__version__ = "0.1.0"
