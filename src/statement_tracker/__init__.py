"""Statement Tracker: parse, categorize and summarize bank CSV statements."""

__version__ = "0.3.0"
