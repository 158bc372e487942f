"""
Per-domain repository modules for database access.

Routers import the module they need, e.g.
`from tracker.db.repositories import demands as demand_repo`.
"""
