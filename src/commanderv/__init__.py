"""
Commander V - join selected files into one clipboard-ready artifact.

This package expands a selection of files and folders into an ordered list
of text files, optionally renders an ASCII project tree filtered by the
workspace ignore file, and wraps every file in delimiting comments so the
whole thing can be pasted into a language model.
"""

__version__ = "0.1.0"
__author__ = "Commander V Team"
