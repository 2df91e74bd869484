"""Portfolio and blog service with privacy-preserving view analytics."""

__version__ = "1.0.0"
