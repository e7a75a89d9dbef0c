"""
Projection of a word alignment back onto subtitle cue boundaries.

Also holds the prefix-recovery pass and realign_words, the single entry
point that runs alignment and remapping for one pair of word sequences.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from .align import AlignmentStep, ScoringConfig, SmithWatermanAligner
from .text import clean_for_comparison, tokenize


class FailureKind( Enum ):
    """Recoverable conditions reported by realign_words."""

    EMPTY_INPUT = "empty_input";
    DEGENERATE_ALIGNMENT = "degenerate_alignment";
    BOUNDARY_MISMATCH = "boundary_mismatch";


@dataclass( frozen=True )
class SegmentBoundary:
    """Half-open range [start, end) of original word indices owned by one cue."""

    start: int;
    end: int;

    def __contains__( self, word_index: int ) -> bool:
        return self.start <= word_index < self.end;

    @property
    def word_count( self ) -> int:
        return self.end - self.start;


@dataclass
class RealignmentResult:
    """Outcome of realign_words; failure is None on success."""

    segments: List[str];
    steps: List[AlignmentStep] = field( default_factory=list );
    best_score: int = 0;
    failure: Optional[FailureKind] = None;

    @property
    def ok( self ) -> bool:
        return self.failure is None;


def build_boundary_table( word_counts: Iterable[int] ) -> List[SegmentBoundary]:
    """Derive contiguous word ranges from per-cue word counts."""
    boundaries = [];
    current = 0;
    for count in word_counts:
        boundaries.append( SegmentBoundary( start=current, end=current + count ) );
        current += count;
    return boundaries;


def validate_boundary_table( boundaries: Sequence[SegmentBoundary], total_words: int ) -> bool:
    """
    Check that the boundaries partition [0, total_words) in order.

    Empty ranges are allowed (cues without words); gaps, overlaps and
    reversed ranges are not.
    """
    expected_start = 0;
    for boundary in boundaries:
        if boundary.start != expected_start or boundary.end < boundary.start:
            return False;
        expected_start = boundary.end;
    return expected_start == total_words;


def remap_alignment_to_segments( steps: Sequence[AlignmentStep], boundaries: Sequence[SegmentBoundary] ) -> List[str]:
    """
    Group the revised words of an alignment by original cue.

    A single forward pass: the cursor moves past every cue whose range ends
    at or before the current original index, flushing the words collected so
    far. Revised words inserted with no original counterpart stay with the
    cue of the preceding original word. Cues the alignment never reaches
    keep the empty string.

    Args:
        steps: Alignment path in increasing index order
        boundaries: Validated boundary table

    Returns:
        One revised-text string per cue
    """
    segments = [ "" ] * len( boundaries );
    cursor = 0;
    collected = [];

    for step in steps:
        if step.original_index is not None:
            while cursor < len( boundaries ) and step.original_index >= boundaries[cursor].end:
                segments[cursor] = " ".join( collected );
                cursor += 1;
                collected = [];

        if cursor >= len( boundaries ):
            break;

        if step.revised_word is not None:
            collected.append( step.revised_word );

    if cursor < len( boundaries ):
        segments[cursor] = " ".join( collected );

    return segments;


def recover_missing_prefix( revised_words: Sequence[str], first_segment_text: str ) -> str:
    """
    Prepend revised words that precede the alignment's starting point.

    Scans the revised words from the start and stops at the first word whose
    comparison form already appears in the first segment; everything before
    it is treated as an unaligned prefix.

    Returns:
        First segment text, with the missing prefix prepended if any
    """
    present = { clean_for_comparison( word ) for word in tokenize( first_segment_text ) };

    missing_prefix = [];
    for word in revised_words:
        if clean_for_comparison( word ) in present:
            break;
        missing_prefix.append( word );

    if not missing_prefix:
        return first_segment_text;

    return " ".join( missing_prefix + tokenize( first_segment_text ) );


def realign_words(
    original_words: Sequence[str],
    revised_words: Sequence[str],
    word_counts: Sequence[int],
    scoring: ScoringConfig = None
) -> RealignmentResult:
    """
    Align revised words against the original cue words and split them per cue.

    Never raises for empty input, boundary mismatches or alignments with no
    match at all; those come back as a result with failure set.

    Args:
        original_words: Words of all cues, flattened in cue order
        revised_words: Tokenized revised text
        word_counts: Number of original words in each cue
        scoring: Scoring parameters, defaults when None

    Returns:
        RealignmentResult with one string per cue
    """
    empty_segments = [ "" ] * len( word_counts );

    if not original_words or not revised_words:
        return RealignmentResult( segments=empty_segments, failure=FailureKind.EMPTY_INPUT );

    boundaries = build_boundary_table( word_counts );
    if not validate_boundary_table( boundaries, len( original_words ) ):
        return RealignmentResult( segments=empty_segments, failure=FailureKind.BOUNDARY_MISMATCH );

    aligner = SmithWatermanAligner( scoring );
    matrices, steps = aligner.align( original_words, revised_words );

    if matrices.best_score == 0:
        return RealignmentResult(
            segments=empty_segments,
            steps=steps,
            best_score=0,
            failure=FailureKind.DEGENERATE_ALIGNMENT
        );

    segments = remap_alignment_to_segments( steps, boundaries );
    return RealignmentResult( segments=segments, steps=steps, best_score=matrices.best_score );
