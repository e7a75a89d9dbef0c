"""
Text normalization helpers: comparison forms for alignment and the
preprocessing applied to revised text before tokenization.
"""
import re
import unicodedata
from typing import List

# Everything that is not a Latin-script letter, accented letters included
NON_LETTER_PATTERN = re.compile( r'[^a-zA-ZÀ-ÿĀ-žçÇœŒßñÑ]+' );

OPEN_QUOTE = "“";
CLOSE_QUOTE = "”";
EM_DASH = "—";


def clean_for_comparison( word: str ) -> str:
    """
    Normalize a word for alignment comparison.

    Applies NFC composition, strips punctuation and anything outside the
    supported Latin alphabet, and lowercases. The stored word is never
    altered; this form is only used for equality tests.

    Args:
        word: Word as it appears in the text

    Returns:
        Comparison form, empty for punctuation-only input
    """
    if not word:
        return "";

    composed = unicodedata.normalize( "NFC", word );
    return NON_LETTER_PATTERN.sub( "", composed ).lower();


def words_match( word1: str, word2: str ) -> bool:
    """Two words match when their comparison forms are equal and non-empty."""
    cleaned1 = clean_for_comparison( word1 );
    return cleaned1 != "" and cleaned1 == clean_for_comparison( word2 );


def replace_straight_quotes( text: str ) -> str:
    """Replace straight double quotes with alternating curly quotes."""
    text = re.sub( f'[{OPEN_QUOTE}{CLOSE_QUOTE}]', '"', text );

    parts = text.split( '"' );
    result = [ parts[0] ];
    for position, part in enumerate( parts[1:] ):
        result.append( OPEN_QUOTE if position % 2 == 0 else CLOSE_QUOTE );
        result.append( part );
    return "".join( result );


def replace_hyphens_with_dashes( text: str ) -> str:
    """Replace isolated hyphens surrounded by whitespace with em dashes."""
    return re.sub( r'(^|\s)-(\s)', rf'\1{EM_DASH}\2', text );


def remove_line_breaks( text: str ) -> str:
    return re.sub( r'\r?\n', ' ', text );


def normalize_spaces( text: str ) -> str:
    return re.sub( r'\s+', ' ', text ).strip();


def prepare_revised_text( text: str ) -> str:
    """
    Apply the full preprocessing chain to user-supplied revised text.

    Quotes are curled, spaced hyphens become em dashes, line breaks are
    flattened, and whitespace is collapsed.
    """
    text = replace_straight_quotes( text );
    text = replace_hyphens_with_dashes( text );
    text = remove_line_breaks( text );
    return normalize_spaces( text );


def tokenize( text: str ) -> List[str]:
    """Split text into words on whitespace, dropping empty tokens."""
    return [ word for word in text.split() if word ];
