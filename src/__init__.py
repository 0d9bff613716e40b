"""
EstateDesk - Core Package

This package contains the real-estate back office: property listings and
verification, leads, deals, tasks, agents and scheduling.
"""

__version__ = "1.0.0"
