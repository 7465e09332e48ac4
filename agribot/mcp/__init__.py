"""Adapters for external record-keeping services."""
