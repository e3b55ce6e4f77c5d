"""Pydantic schemas package.

Folder intent:
  common.py   — CamelModel base + HealthResponse (all schemas inherit CamelModel)
  orders.py   — Order, progress, document and status-history DTOs
"""
