"""Command-line entry point for running SQL through a database handle."""
