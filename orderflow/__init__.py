"""
Order flow charts: Volume Profile and Delta Volume for crypto trades.
"""

__version__ = "0.1.0"
