"""Configuration-variable slicing over srcML documents: signatures, declarations, data flow and loop lookups."""

__version__ = "0.1.0"