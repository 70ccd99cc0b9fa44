"""API middleware: request ids, timing and error rendering."""
