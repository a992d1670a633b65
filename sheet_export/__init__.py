"""Spreadsheet to delimited text exporter with personnel attendance reshaping."""

__version__ = "0.1.0"
