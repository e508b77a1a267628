"""
PySide6 GUI for reviewing segmented questions and correcting crops.

Importing this package requires PySide6.
"""
