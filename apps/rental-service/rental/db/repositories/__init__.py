"""
Per-domain repository modules for database access.

Each module is a set of plain functions taking a `Session`; event-sourced
aggregates (customers, reservations) go through `rental.db.event_store`.
"""
