"""Clients for docker-machine and cloud provider APIs."""
