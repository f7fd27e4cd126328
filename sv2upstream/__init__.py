"""Pool-facing side of a Stratum V1 to V2 mining translator proxy."""

__version__ = "1.0.0"