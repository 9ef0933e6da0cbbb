"""Helpers behind compress_html.py: class names, style deduplication, minification, PDF export."""
