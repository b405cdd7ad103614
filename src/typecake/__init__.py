"""TypeCake: a pattern-matching language compiled to TypeScript types."""

__version__ = "0.1.0"
