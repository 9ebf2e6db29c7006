"""Test fixtures for DES.

This package provides reusable test fixtures for all DES components:
- filesystem: Seeded filesystem engines
- sessions: Fake gateways, window manager, executor and terminal sessions
- api: TestClient wired to the session fixtures through dependency overrides
"""
