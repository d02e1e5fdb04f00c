"""
Daylog - an hour-by-hour time journal for the terminal.
"""

__version__ = "0.1.0"
