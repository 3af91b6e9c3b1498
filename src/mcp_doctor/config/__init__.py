"""Configuration constants and layered settings resolution."""
