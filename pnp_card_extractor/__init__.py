"""PnP Card Extractor - NetrunnerDB metadata for print-and-play card images."""

__version__ = "0.1.0"
