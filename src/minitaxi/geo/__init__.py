"""Geography: coordinates, distances, and route acquisition."""
