"""Named identifier storage layer.

This package maps string names to persistent GUIDs stored inside host
documents through the extensible storage facility.
"""
