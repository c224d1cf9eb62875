"""
Integration tests for sitesnap.

These tests run against a PostgreSQL container provisioned with
testcontainers and are skipped automatically when Docker, testcontainers
or asyncpg is missing.

Run integration tests:
    pytest tests/integration/ -v

Skip integration tests:
    pytest tests/ -v -m "not integration"
"""
