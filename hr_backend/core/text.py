"""Text normalization applied to names and logins before they are stored."""


def to_title_case(text: str) -> str:
    """Title-case every word: 'JOÃO DA SILVA' -> 'João Da Silva'."""
    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split(" "))


def enforce_case(text):
    """Convert ALL-CAPS input to title case; leave anything else untouched.

    A string counts as all-caps only when it contains at least one cased
    letter, so digits-only values such as CPF numbers pass through.
    """
    if not isinstance(text, str):
        return text
    if text and text.upper() == text and text.lower() != text:
        return to_title_case(text)
    return text
