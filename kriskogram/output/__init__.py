"""Output stages — baseline layout and legend synthesis."""
