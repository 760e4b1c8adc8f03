"""
Contracts (data models).

This folder defines the shapes exchanged with external systems and API callers:
- policy records and lookup results (policies.py)
- claim types, statuses and the claim JSON view (claims.py)

Both mock and real HTTP clients return these contracts.
"""
