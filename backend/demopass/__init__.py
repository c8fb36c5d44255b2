"""Demo Pass - batch enrollment and QR attendance tracking for demo classes."""

__version__ = "1.0.0"
