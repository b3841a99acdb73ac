"""linkage-audit: check the dynamic-library linkage of installed kegs."""

__version__ = "0.1.0"
