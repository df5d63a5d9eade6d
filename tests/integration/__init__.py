"""Integration tests for cockroach-prod.

These tests interact with real external tools and services and require:
- An installed docker-machine binary
- Valid AWS credentials and a docker-machine security group in the test region

Tests are marked with @pytest.mark.integration and can be run with:
    pytest tests/integration/ -m integration

To skip integration tests:
    pytest -m "not integration"
"""
