"""Command-line interface for sqlgoose."""
