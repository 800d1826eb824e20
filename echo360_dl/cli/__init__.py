"""
Command-line layer: the Typer application, Rich progress display and
console formatters.
"""
