"""Host document model.

This package stands in for the CAD host: open documents, scoped write
transactions, a session-wide schema registry, and schema-tagged entities
attached to data storage elements.
"""
