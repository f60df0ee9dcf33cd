"""Textual presentation layer: pure views and custom widgets."""
