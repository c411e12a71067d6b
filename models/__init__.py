# This file makes the models directory a Python package 
from .bible import BibleVersion, BibleBook, BibleVerse

__all__ = [
    'BibleVersion',
    'BibleBook',
    'BibleVerse',
]
