"""Concrete collaborators: HTTP language-model extractor and SQLAlchemy stores."""
