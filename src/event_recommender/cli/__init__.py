"""
CLI module for keyphrase extraction.

Provides command-line tools for batch processing event texts.
"""

from event_recommender.cli.extract import main as extract_main

__all__ = ["extract_main"]
