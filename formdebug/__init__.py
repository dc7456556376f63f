"""formdebug - static analyzer for declarative form configurations."""

__version__ = "0.1.0"
