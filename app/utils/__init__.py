"""Utility modules for the Estate Listing API."""
