"""rl-playground CLI commands."""
