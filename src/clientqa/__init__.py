"""Client Q&A Bot: safe natural-language answers over a user's scoped clients."""

__version__ = "1.0.0"
