"""Command line interface for sukhan."""
