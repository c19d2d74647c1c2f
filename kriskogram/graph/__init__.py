"""Graph stages — snapshot preparation, filtering, ego expansion and temporal overlay."""
