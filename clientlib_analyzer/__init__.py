"""clientlib-analyzer: find declared, used, duplicated and circular client libraries."""

__version__ = "0.1.0"
