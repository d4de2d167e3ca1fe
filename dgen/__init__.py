"""dgen-one: documentation generator for JavaScript source files."""

__version__ = "0.1.0"
