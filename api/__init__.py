"""HTTP surface of the emotion letterbox."""
