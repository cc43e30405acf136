"""Infrastructure layer: keyed stores and the NetworkX graph view."""
