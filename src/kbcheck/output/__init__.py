"""Output layer: renders ServiceResult as JSON or rich text."""
