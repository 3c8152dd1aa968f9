"""Printable documents: pure page layout plus HTML rendering."""
