"""Tango vocabulary spaced-repetition backend."""
