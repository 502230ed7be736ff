"""Action and step models, contexts, expression parsing and workflow commands."""

__version__ = "0.1.0"