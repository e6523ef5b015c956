"""
PRD to HTML Mockup Generation

Turns a product-requirements document (Word, PDF or image) plus optional
free-text guidance into several standalone, interactive HTML mockups using
a Large Language Model.
"""

__version__ = "0.1.0"
