"""Command line interface for OpenCode Harness."""
