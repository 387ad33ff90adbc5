"""Adapters around the engine: file sources, logging setup and the CLI."""
