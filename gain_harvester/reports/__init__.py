"""
Report generation modules for console and Excel output.
"""

from .console import ConsoleReporter
from .excel import ExcelReporter

__all__ = [
    "ConsoleReporter",
    "ExcelReporter",
]
