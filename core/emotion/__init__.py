"""Emotion domain: value objects, prompts, track selection and trend math."""
