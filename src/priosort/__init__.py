"""priosort — priority cycling and sorting for outline blocks."""

__version__ = "0.3.0"
