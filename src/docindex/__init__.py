"""docindex - local TF-IDF search over a document folder."""

__version__ = "0.1.0"
