"""
Settlement Sync.

Scrapes BitCraft settlement data from bitjita.com, normalizes inventory,
member and skill records, and mirrors them into the hosted settlement
database. Also ships the item catalog cache and package aggregation used by
the settlement views.
"""

__version__ = "0.3.0"
