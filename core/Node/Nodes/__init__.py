"""
Node implementations, grouped by category (System, ...).

Kept free of imports: NodeRegistry walks this package with pkgutil and
imports each node module itself.
"""
