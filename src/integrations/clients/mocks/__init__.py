"""
Mock integration clients.

These clients return fake (but realistic) responses without calling any external API.
They are used when:
- the upstream policy API is not reachable from the environment
- we want to test the claims API end-to-end without external dependencies

Important:
- Mock clients must follow the SAME interface as real HTTP clients.
- Mock clients should return data shaped according to src/integrations/contracts/*

Switching to real:
Set INTEGRATIONS_MODE=real (see src/api/dependencies.py).
"""
