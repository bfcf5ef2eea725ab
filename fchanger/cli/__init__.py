"""Command line interface for Fchanger."""
