"""Administration of CERNBox project spaces and shares."""

__version__ = "0.1.0"
