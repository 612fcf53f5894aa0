"""Shared types, exceptions, configuration and tree traversal."""
