# utils/slides.py
from enum import Enum


class SlideMode(str, Enum):
    PLAIN = "plain"
    ANNOTATED = "annotated"


def render_verse(verse, mode=SlideMode.ANNOTATED):
    if SlideMode(mode) is SlideMode.PLAIN:
        return verse.text
    version_suffix = f" ({verse.version.upper()})" if verse.version else ""
    return (f"{verse.verse}. {verse.text}\n\n"
            f"[{verse.book_name} {verse.chapter}:{verse.verse}{version_suffix}]")


def generate_bible_slides(verses, mode=SlideMode.ANNOTATED):
    """One slide per verse, in the order given."""
    return [render_verse(verse, mode) for verse in verses]


def format_reference(verses):
    """'John 3:16' for one verse, 'John 3:16-18' for a range."""
    if not verses:
        return ''
    first, last = verses[0], verses[-1]
    reference = f"{first.book_name} {first.chapter}:{first.verse}"
    if len(verses) > 1:
        reference += f"-{last.verse}"
    return reference


def combine_text(verses):
    return ' '.join(verse.text for verse in verses)
