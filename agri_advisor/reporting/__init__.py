"""
agri_advisor.reporting — Terminal formatting for CLI commands.

Formatters take already-computed panel data (ranked crops, grouped schemes,
market insights) and return plain strings. They never load or fetch data.

Modules:
  formatters — ASCII report and table formatters for Typer CLI commands.
"""
