"""
Version constants for the keyphrase extraction and ranking pipeline.

Component versions are reported by the API and stored with extraction results
so keyphrase sets can be traced back to the code that produced them.
"""

from typing import Dict

from .enhancement.prompts import PROMPT_VERSION
from .lexical import STOPLIST_VERSION, TEXTRANK_VERSION, TOKENIZER_VERSION

# API Version
API_VERSION = "1.0.0"

# Component versions (update these when implementations change)
RECONCILER_VERSION = "reconciler-1.0.0"
RANKER_VERSION = "ranker-1.0.0"


def get_component_versions() -> Dict[str, str]:
    """
    Get current component versions.

    Returns:
        Mapping of component name to version string
    """
    return {
        "textrank": TEXTRANK_VERSION,
        "tokenizer": TOKENIZER_VERSION,
        "stoplist": STOPLIST_VERSION,
        "prompt": PROMPT_VERSION,
        "reconciler": RECONCILER_VERSION,
        "ranker": RANKER_VERSION,
    }
