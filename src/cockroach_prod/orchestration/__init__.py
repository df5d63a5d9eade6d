"""Cluster orchestration."""
