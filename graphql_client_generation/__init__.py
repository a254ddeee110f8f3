"""Generate typed Python GraphQL client bindings from a schema file."""

__version__ = "0.0.1"
