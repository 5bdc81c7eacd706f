"""Command line interface for rl-playground."""
