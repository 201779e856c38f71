"""DID URLs, documents, verification methods, key encodings and dereferencing."""

__version__ = "0.1.2"