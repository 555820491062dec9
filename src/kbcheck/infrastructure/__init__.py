"""Infrastructure layer: file discovery, schema loading, and the document graph."""
