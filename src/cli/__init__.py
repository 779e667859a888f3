"""Command-line interface for named GUID documents."""
