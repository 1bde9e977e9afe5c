"""Command-line interface for tripledger."""
