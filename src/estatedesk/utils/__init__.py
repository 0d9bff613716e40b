"""
Shared utilities: structured logging and geographic helpers.
"""
