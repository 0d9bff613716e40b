"""
EstateDesk - Real Estate CRM Back Office

Properties, leads, agents, deals, tasks and calendar events behind a
role-gated REST API, with property verification and an append-only
activity trail.
"""

__version__ = "1.0.0"
