"""acematch: matching de propiedades e inversores."""

__version__ = "0.1.0"
