"""Command line interface for the img rectifier."""
