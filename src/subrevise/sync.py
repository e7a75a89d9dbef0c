"""
Main realignment controller that orchestrates the entire process.
"""
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional
import Levenshtein

from .align import ScoringConfig
from .logging import get_logger
from .remap import FailureKind, RealignmentResult, realign_words, recover_missing_prefix
from .subtitles import DEFAULT_MAX_LINE_CHARS, SubtitleProcessor, SubtitleTrack, revised_output_path
from .text import clean_for_comparison, prepare_revised_text, tokenize

ProgressCallback = Callable[[int, str], None];

FAILURE_MESSAGES = {
    FailureKind.EMPTY_INPUT: "One of the word sequences (original or revised) is empty.",
    FailureKind.BOUNDARY_MISMATCH: "Cue word counts do not cover the original text exactly.",
    FailureKind.DEGENERATE_ALIGNMENT: "No usable match found between the subtitles and the revised text."
};

DIAGNOSTIC_PUNCTUATION = re.compile( r'[.,“”"`?!:;()\[\]{}]' );


@dataclass
class SyncDiagnostics:
    """Quality figures comparing the revised input with the generated cues."""

    match_score: int;         # % of revised words reproduced at the same position
    similarity: float;        # % positional word equality after punctuation stripping
    edit_similarity: float;   # Levenshtein similarity of the same normalized texts (0.0-1.0)


def calculate_match_score( revised_words: List[str], output_words: List[str] ) -> int:
    """Percentage of revised words whose comparison form equals the output word at the same position."""
    if not revised_words:
        return 0;

    matched = 0;
    for revised_word, output_word in zip( revised_words, output_words ):
        if clean_for_comparison( revised_word ) == clean_for_comparison( output_word ):
            matched += 1;

    return round( matched / len( revised_words ) * 100 );


def _normalize_for_similarity( text: str ) -> str:
    text = DIAGNOSTIC_PUNCTUATION.sub( "", text ).lower();
    return re.sub( r'\s+', ' ', text ).strip();


def calculate_similarity( text1: str, text2: str ) -> float:
    """
    Word-by-word positional similarity of two texts as a percentage.

    Punctuation is stripped and case folded; positions past the end of the
    shorter text count as mismatches.
    """
    words1 = _normalize_for_similarity( text1 ).split( " " );
    words2 = _normalize_for_similarity( text2 ).split( " " );
    total = max( len( words1 ), len( words2 ) );

    matches = 0;
    for position in range( total ):
        word1 = words1[position] if position < len( words1 ) else "";
        word2 = words2[position] if position < len( words2 ) else "";
        if word1 == word2:
            matches += 1;

    return 0.0 if total == 0 else matches / total * 100;


def calculate_edit_similarity( text1: str, text2: str ) -> float:
    """
    Character-level similarity from the Levenshtein distance of the normalized texts.

    similarity = 1 - (distance / max_length), 1.0 for two empty texts.
    """
    normalized1 = _normalize_for_similarity( text1 );
    normalized2 = _normalize_for_similarity( text2 );
    max_length = max( len( normalized1 ), len( normalized2 ) );

    if max_length == 0:
        return 1.0;

    distance = Levenshtein.distance( normalized1, normalized2 );
    return 1.0 - ( distance / max_length );


class SubtitleRealigner:
    """
    Main controller for subtitle text realignment.

    Orchestrates:
    1. Subtitle parsing
    2. Revised text preprocessing and tokenization
    3. Smith-Waterman alignment and per-cue remapping
    4. Recovery of unaligned leading words
    5. Quality diagnostics
    6. Output formatting in the source container
    """

    def __init__(
        self,
        subtitle_file: Path,
        revised_file: Path,
        output_file: Path = None,
        scoring: ScoringConfig = None,
        max_line_chars: int = DEFAULT_MAX_LINE_CHARS,
        debug: bool = False,
        dry_run: bool = False,
        progress: Optional[ProgressCallback] = None
    ):
        self.subtitle_file = Path( subtitle_file );
        self.revised_file = Path( revised_file );
        self.output_file = Path( output_file ) if output_file else revised_output_path( self.subtitle_file );
        self.scoring = scoring if scoring is not None else ScoringConfig();
        self.debug = debug;
        self.dry_run = dry_run;
        self.progress = progress;

        self.logger = get_logger( debug=debug );
        self.subtitle_processor = SubtitleProcessor( max_line_chars=max_line_chars );

        # Results storage
        self.track: Optional[SubtitleTrack] = None;
        self.revised_words: List[str] = [];
        self.result: Optional[RealignmentResult] = None;
        self.segments: List[str] = [];
        self.revised_track: Optional[SubtitleTrack] = None;
        self.diagnostics: Optional[SyncDiagnostics] = None;

    def _report( self, percent: int, message: str ):
        """Forward a progress update to the caller and the debug log."""
        self.logger.debug( f"[{percent:3d}%] {message}" );
        if self.progress is not None:
            self.progress( percent, message );

    def load_subtitles( self ) -> SubtitleTrack:
        """Parse the original subtitle file."""
        self.logger.info( "=== STEP 1: SUBTITLE PARSING ===" );

        self.track = self.subtitle_processor.parse_subtitle_file( self.subtitle_file );

        stats = self.subtitle_processor.get_track_stats( self.track );
        self.logger.info( f"Parsed {stats['total_entries']} cues with {stats['total_words']} words " \
                         f"({stats['duration_seconds'] / 60:.1f} minutes)" );
        if stats['empty_entries']:
            self.logger.debug( f"{stats['empty_entries']} cue(s) contain no words" );

        return self.track;

    def load_revised_text( self ) -> List[str]:
        """Read, preprocess and tokenize the revised text."""
        self.logger.info( "=== STEP 2: REVISED TEXT PREPARATION ===" );

        if not self.revised_file.exists():
            raise RuntimeError( f"Revised text file not found: {self.revised_file}" );

        raw_text = self.revised_file.read_text( encoding="utf-8-sig" );
        self.revised_words = tokenize( prepare_revised_text( raw_text ) );

        self.logger.info( f"Revised text contains {len( self.revised_words )} words" );
        return self.revised_words;

    def align_text( self ) -> RealignmentResult:
        """Align the revised words against the cue words and split them per cue."""
        self.logger.info( "=== STEP 3: TEXT ALIGNMENT ===" );

        if self.track is None:
            raise RuntimeError( "No subtitles loaded. Run load_subtitles first." );

        original_words = self.track.original_words();
        self.logger.debug( f"Scoring: match={self.scoring.match_score}, " \
                          f"mismatch={self.scoring.mismatch_penalty}, gap={self.scoring.gap_penalty}" );
        self.logger.debug( f"DP matrix size: {len( original_words ) + 1} x {len( self.revised_words ) + 1}" );

        self.result = realign_words(
            original_words,
            self.revised_words,
            self.track.word_counts(),
            self.scoring
        );

        if not self.result.ok:
            raise RuntimeError( FAILURE_MESSAGES[self.result.failure] );

        aligned = sum( 1 for step in self.result.steps if step.revised_index is not None );
        self.logger.info( f"Best local alignment score {self.result.best_score} " \
                         f"covering {aligned}/{len( self.revised_words )} revised words" );

        self.segments = list( self.result.segments );
        return self.result;

    def recover_prefix( self ) -> List[str]:
        """Put revised words that precede the alignment start back into the first cue."""
        if not self.segments:
            raise RuntimeError( "No aligned segments. Run align_text first." );

        recovered = recover_missing_prefix( self.revised_words, self.segments[0] );
        if recovered != self.segments[0]:
            added = len( tokenize( recovered ) ) - len( tokenize( self.segments[0] ) );
            self.logger.info( f"Recovered {added} leading word(s) into the first cue" );
            self.segments[0] = recovered;

        return self.segments;

    def compute_diagnostics( self ) -> SyncDiagnostics:
        """Compare the generated cue text with the revised input."""
        output_text = " ".join( segment for segment in self.segments if segment );
        revised_text = " ".join( self.revised_words );

        self.diagnostics = SyncDiagnostics(
            match_score=calculate_match_score( self.revised_words, tokenize( output_text ) ),
            similarity=calculate_similarity( output_text, revised_text ),
            edit_similarity=calculate_edit_similarity( output_text, revised_text )
        );

        self.logger.info( f"Match score: {self.diagnostics.match_score}% | " \
                         f"Similarity: {self.diagnostics.similarity:.2f}% | " \
                         f"Edit similarity: {self.diagnostics.edit_similarity:.1%}" );

        empty_cues = sum( 1 for segment in self.segments if not segment );
        if empty_cues:
            self.logger.warning( f"{empty_cues} cue(s) received no revised text" );

        return self.diagnostics;

    def write_output( self ) -> Path:
        """Format the revised cues in the source container and save them."""
        self.logger.info( "=== STEP 4: OUTPUT ===" );

        self.revised_track = self.track.with_revised_text( self.segments );

        if self.dry_run:
            self.logger.info( f"Dry run: Would save revised subtitles to {self.output_file}" );
            return self.output_file;

        return self.subtitle_processor.write_track( self.revised_track, self.output_file );

    def run( self ) -> bool:
        """
        Run the complete realignment process.

        Returns:
            True if successful, False if failed
        """
        try:
            self.logger.info( "Starting SubRevise subtitle realignment" );
            self.logger.info( f"Subtitles: {self.subtitle_file}" );
            self.logger.info( f"Revised text: {self.revised_file}" );

            self._report( 0, "Reading subtitles and revised text..." );
            self.load_subtitles();
            self.load_revised_text();

            self._report( 10, "Finding the best way to match your words..." );
            self.align_text();

            self._report( 50, "Recovering unaligned leading words..." );
            self.recover_prefix();

            self._report( 80, "Writing revised subtitles..." );
            self.compute_diagnostics();
            output_file = self.write_output();

            self._report( 100, "Sync complete!" );
            return self._log_final_results( output_file );

        except Exception as e:
            self.logger.error( f"Subtitle realignment failed: {e}" );
            if self.debug:
                raise;
            return False;

    def _log_final_results( self, output_file: Path ) -> bool:
        """Log final results."""
        self.logger.info( "\n=== REALIGNMENT COMPLETE ===" );

        if not self.dry_run:
            self.logger.info( f"✓ Revised subtitles saved to: {output_file}" );
        else:
            self.logger.info( "✓ Dry run completed - no files written" );

        self.logger.info( f"✓ Cues: {len( self.segments )}" );
        if self.diagnostics:
            self.logger.info( f"✓ Match score: {self.diagnostics.match_score}%" );

        return True;
