"""
FastAPI routers for the local UI.

Each module defines a router for one concern (health, sync, events, reset).
All routers reach the services through the SyncContext stored on app.state.
"""
