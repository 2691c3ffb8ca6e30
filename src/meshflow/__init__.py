"""MeshFlow graph intelligence: embeddings, auto-linking, clustering and layout."""

__version__ = "0.1.0"
