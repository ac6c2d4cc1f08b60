"""Shared library: domain models, document repositories and domain stores."""
