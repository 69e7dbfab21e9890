"""Rendering adapters that turn a ``GraphFrame`` into output."""
