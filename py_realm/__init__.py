"""
py-realm: procedural political-map layout engine.

Turns a small hierarchy of named points (countries, provinces, cities and towns)
plus road links into region polygons, road paths, terrain scatter and label
offsets. Everything is a pure function of the input graph and a seed.
"""

__version__ = "0.1.0"
