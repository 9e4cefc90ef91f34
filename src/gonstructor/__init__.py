"""
gonstructor - constructor generator for Go structs.

Analyzes a Go package, finds a struct declaration and writes an all-args
constructor and/or a fluent builder for it.
"""

__version__ = "1.0.0"
