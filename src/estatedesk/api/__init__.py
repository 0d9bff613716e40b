"""
FastAPI REST API for the EstateDesk back office

Provides REST endpoints for:
- Authentication (registration, bearer tokens)
- Property listings, document review and title/survey verification
- Leads, deals and their activity logs
- Tasks, agents and calendar events
- Health checks
"""
