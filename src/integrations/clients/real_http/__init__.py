"""
Real HTTP integration clients.

These clients communicate with real external systems via HTTP:
- the upstream policy lookup API (policy_api.py)

Important:
- Must implement the same interface as the mock clients
- Must return data shaped according to src/integrations/contracts/*

Switching:
The selection of mock vs real clients happens in src/api/dependencies.py only.
"""
