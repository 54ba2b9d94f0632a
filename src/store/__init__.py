"""Table storage layer.

This module persists whole reference tables behind one storage port.
It provides transient in-memory and durable two-document backends.
"""
