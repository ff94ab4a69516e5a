"""Command line tooling for repairing board card content orders."""
