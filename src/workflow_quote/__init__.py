"""
Workflow Quote Package

Prices n8n automation workflows node by node against a configurable
node-type price table, and flags nodes that need manual review.
"""

__version__ = "1.0.0"
