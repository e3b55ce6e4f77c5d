"""Services package — all business logic lives here, never in routers.

Files:
  progress_rules.py  — Pure rules: required steps, document gate, status derivation
  order_progress.py  — Progress toggle + progress summary (transactional)
  documents.py       — Document upload with progress side effect
  orders.py          — Order detail and manual status override

Rule: routers call services, services call repositories, repositories call the DB.
      No SQLAlchemy queries in routers. No FastAPI imports in services.
"""
