"""Workbook reading and writing."""
