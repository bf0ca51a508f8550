"""formulary: group flat formula/material tables into formula aggregates."""

__version__ = "0.1.0"
