"""Routers package — HTTP endpoint definitions.

Files:
  orders.py     — Order detail and manual status override (/api/orders/{id}, /status)
  progress.py   — Progress checklist read + toggle (/api/orders/{id}/progress)
  documents.py  — Multipart document upload (/api/orders/documents/upload)

Rule: Routers only handle HTTP (request parsing, response shaping).
      All business logic delegates to formation_api/services/.
"""
