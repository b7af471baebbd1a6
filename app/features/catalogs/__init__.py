"""
Catalog feature module.

Ordered, typed, soft-deletable lookup values (property types, areas, lead
sources, contract types) used for dropdowns and validation elsewhere.
"""
