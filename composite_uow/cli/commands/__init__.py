"""CLI commands for Composite-UoW."""
