"""CLI commands for Fchanger."""
