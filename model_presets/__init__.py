"""Automatic preset selection when the active text-generation model changes."""
