"""Studio: component-tree document model and mutation engine."""

__version__ = "0.1.0"
