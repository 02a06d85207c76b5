"""
Tools for listing and summarising a local Maildir mail store.
"""

__version__ = "0.1.0"
