"""
Guardian - Core Package
=======================

Configuration, logging, constants and the settings database.
"""
