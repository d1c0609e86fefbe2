"""
Remote data access

This package handles requests to the Kite API.
"""

from kite_news.database.kite_client import KiteClient

__all__ = ['KiteClient']
