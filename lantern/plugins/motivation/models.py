from pydantic import BaseModel

DEFAULT_QUOTE = "Semangat Ramadhan!"


class MotivationContent(BaseModel):
    """Daily quote plus a short doctrinal excerpt (original text and translation)."""

    quote: str = DEFAULT_QUOTE
    excerpt_original: str = ""
    excerpt_translation: str = ""
