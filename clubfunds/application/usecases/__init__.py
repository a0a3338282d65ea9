"""Application use cases grouped by area (roles, users, payments, expenses, audit)."""
