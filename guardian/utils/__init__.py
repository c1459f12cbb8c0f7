"""
Guardian - Utilities
====================

Async helpers and Discord HTTP error handling.
"""
