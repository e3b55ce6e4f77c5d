"""Repositories package — one async repository per aggregate, no business rules.

Files:
  base.py            — Generic BaseRepository[ModelT]
  order.py           — Orders (row-locking load for progress mutations)
  progress.py        — Progress events, upsert keyed by (order, event type)
  document.py        — Documents, latest-per-type bookkeeping
  status_history.py  — Append-only status transitions
"""
