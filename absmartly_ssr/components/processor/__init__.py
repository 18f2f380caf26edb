"""
Processor component - Orchestrates Treatment tags and DOM changes per page.
"""

from ._impl import HTMLProcessor
from .component import process_html, run_process
from .models import ProcessHtmlInput, ProcessHtmlOutput

__all__ = [
    # Entry points
    "process_html",
    "run_process",
    # Input models
    "ProcessHtmlInput",
    # Output models
    "ProcessHtmlOutput",
    # Processor
    "HTMLProcessor",
]
