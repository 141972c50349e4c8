"""Top-level package for Docvoice.

Docvoice turns a tree of documentation files into narrated audio chapters:
document, dialogue transcript, narrated dialogue, spoken intro, merged chapter.
The main orchestration entry point is `DocvoicePipeline`.
"""

from .pipeline import DocvoicePipeline

__all__ = ["DocvoicePipeline", "__version__"]

__version__ = "0.1.0"
