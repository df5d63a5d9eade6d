"""Cockroach node inventory."""
