"""Reference-table engine.

This module orchestrates table creation, merge-only synchronization,
row upserts, and materialized reads on top of the table storage port.
"""
