"""Command-line interface for the document dispatcher."""
