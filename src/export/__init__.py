"""Snapshot export layer.

This module publishes materialized reference-table mappings to an
addressable location outside the table's own storage.
"""
