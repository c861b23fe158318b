"""Request classification and streaming relay for resolved media."""
