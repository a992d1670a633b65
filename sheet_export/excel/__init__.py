"""Workbook reading (pandas + openpyxl / xlrd)."""
