"""ORM models and engine/session helpers for the emotion store."""
