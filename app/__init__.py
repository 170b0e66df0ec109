"""
Estate Listing API.
REST backend for listing, searching and moderating real-estate properties.
"""

__version__ = "1.0.0"
