"""Generate typed response and variable models from GraphQL operations."""

__version__ = "0.1.0"
