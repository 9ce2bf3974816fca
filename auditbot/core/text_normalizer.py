"""
Text Normalization

Every matcher compares text through normalize() so that English and Turkish
spellings with or without diacritics compare equal:

- "AÇIK" -> "acik"
- "İşlem" -> "islem"
- "  Gecikmiş  " -> "gecikmis"
"""
import unicodedata

# Dotless i has no decomposition, so NFD alone would leave "açık" as "acık".
_FOLD_TABLE = str.maketrans({"ı": "i"})


def normalize(text: str) -> str:
    """Lower-case, strip combining diacritical marks and trim."""
    if not text:
        return ""
    lowered = text.lower().translate(_FOLD_TABLE)
    decomposed = unicodedata.normalize("NFD", lowered)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.strip()
