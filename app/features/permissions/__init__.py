"""
Role permission matrix feature module.

Stores a per-position, per-resource, per-action authorization matrix as flat
rows and serves it as a nested matrix.
"""
