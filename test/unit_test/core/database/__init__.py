"""Unit tests for the database layer.

Repositories run against in-memory SQLite with the shared seeded fixtures;
the generic CRUD paths are also checked against a mocked session.
"""
