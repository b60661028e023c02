"""Plan Cost - Health plan cost comparison calculator."""

__version__ = "0.1.0"
