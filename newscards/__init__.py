"""NewsCards: RSS and Twitter aggregation into AI-rewritten Telugu news cards."""

__version__ = "0.1.0"
