"""Referral earnings and withdrawals API"""

__version__ = "1.0.0"
