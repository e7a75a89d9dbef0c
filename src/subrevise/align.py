"""
Smith-Waterman local alignment over word sequences.

The aligner is a pure computation: it builds the score and traceback
matrices for two word sequences and reconstructs the best local alignment
path. It keeps no state between calls and reports nothing beyond its
return values.
"""
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from .text import clean_for_comparison

DEFAULT_MATCH_SCORE = 2;
DEFAULT_MISMATCH_PENALTY = -1;
DEFAULT_GAP_PENALTY = -1;


class Direction( Enum ):
    """Predecessor that produced a cell's score in the traceback matrix."""

    NONE = "none";          # Score 0, a fresh local alignment start
    DIAGONAL = "diagonal";
    UP = "up";              # Consumed a word from the original only
    LEFT = "left";          # Consumed a word from the revised text only


class StepType( Enum ):
    """Classification of one step of an alignment path."""

    MATCH = "match";
    MISMATCH = "mismatch";
    GAP_IN_ORIGINAL = "gap_in_original";  # Revised word with no original counterpart
    GAP_IN_REVISED = "gap_in_revised";    # Original word with no revised counterpart


@dataclass( frozen=True )
class ScoringConfig:
    """Scoring parameters for the alignment recurrence."""

    match_score: int = DEFAULT_MATCH_SCORE;
    mismatch_penalty: int = DEFAULT_MISMATCH_PENALTY;
    gap_penalty: int = DEFAULT_GAP_PENALTY;


@dataclass( frozen=True )
class AlignmentStep:
    """
    One unit of the reconstructed alignment path.

    Gap steps carry None for the index and word of the side that
    contributes nothing.
    """

    original_index: Optional[int];
    revised_index: Optional[int];
    original_word: Optional[str];
    revised_word: Optional[str];
    step_type: StepType;

    @property
    def is_gap( self ) -> bool:
        return self.step_type in ( StepType.GAP_IN_ORIGINAL, StepType.GAP_IN_REVISED );


@dataclass
class MatrixResult:
    """Output of the DP fill: both matrices plus the best cell."""

    score_matrix: List[List[int]];
    traceback_matrix: List[List[Direction]];
    best_score: int;
    best_position: Tuple[int, int];


class SmithWatermanAligner:
    """
    Local aligner for two word sequences.

    Cell (i, j) scores the best local alignment ending at original word i
    and revised word j. Ties between predecessors resolve in the fixed order
    diagonal, up, left, so output is deterministic for a given input.
    """

    def __init__( self, scoring: ScoringConfig = None ):
        self.scoring = scoring if scoring is not None else ScoringConfig();

    def build_matrices( self, seq1: Sequence[str], seq2: Sequence[str] ) -> MatrixResult:
        """
        Fill the score and traceback matrices.

        Args:
            seq1: Original words
            seq2: Revised words

        Returns:
            MatrixResult with the first maximum found in row-major order
        """
        n = len( seq1 );
        m = len( seq2 );
        match_score = self.scoring.match_score;
        mismatch_penalty = self.scoring.mismatch_penalty;
        gap_penalty = self.scoring.gap_penalty;

        # Comparison forms are computed once per word, not once per cell
        cleaned1 = [ clean_for_comparison( word ) for word in seq1 ];
        cleaned2 = [ clean_for_comparison( word ) for word in seq2 ];

        score_matrix = [ [ 0 ] * ( m + 1 ) for _ in range( n + 1 ) ];
        traceback_matrix = [ [ Direction.NONE ] * ( m + 1 ) for _ in range( n + 1 ) ];

        best_score = 0;
        best_position = ( 0, 0 );

        for i in range( 1, n + 1 ):
            word1 = cleaned1[i - 1];
            previous_row = score_matrix[i - 1];
            current_row = score_matrix[i];
            directions = traceback_matrix[i];

            for j in range( 1, m + 1 ):
                is_match = word1 != "" and word1 == cleaned2[j - 1];
                diag_score = previous_row[j - 1] + ( match_score if is_match else mismatch_penalty );
                up_score = previous_row[j] + gap_penalty;
                left_score = current_row[j - 1] + gap_penalty;

                score = max( 0, diag_score, up_score, left_score );
                current_row[j] = score;

                if score == 0:
                    directions[j] = Direction.NONE;
                elif score == diag_score:
                    directions[j] = Direction.DIAGONAL;
                elif score == up_score:
                    directions[j] = Direction.UP;
                else:
                    directions[j] = Direction.LEFT;

                # Strict comparison keeps the first maximum in scan order
                if score > best_score:
                    best_score = score;
                    best_position = ( i, j );

        return MatrixResult(
            score_matrix=score_matrix,
            traceback_matrix=traceback_matrix,
            best_score=best_score,
            best_position=best_position
        );

    def traceback(
        self,
        seq1: Sequence[str],
        seq2: Sequence[str],
        score_matrix: List[List[int]],
        traceback_matrix: List[List[Direction]],
        start_position: Tuple[int, int]
    ) -> List[AlignmentStep]:
        """
        Reconstruct the local alignment ending at start_position.

        Walks predecessors until a zero-score cell or the matrix edge. Words
        outside the walked range are simply not part of the alignment.

        Returns:
            Alignment steps in increasing index order
        """
        steps = [];
        i, j = start_position;

        while i > 0 and j > 0 and score_matrix[i][j] > 0:
            direction = traceback_matrix[i][j];

            if direction is Direction.DIAGONAL:
                word1 = seq1[i - 1];
                word2 = seq2[j - 1];
                cleaned1 = clean_for_comparison( word1 );
                is_match = cleaned1 != "" and cleaned1 == clean_for_comparison( word2 );
                steps.append( AlignmentStep(
                    original_index=i - 1,
                    revised_index=j - 1,
                    original_word=word1,
                    revised_word=word2,
                    step_type=StepType.MATCH if is_match else StepType.MISMATCH
                ) );
                i -= 1;
                j -= 1;
            elif direction is Direction.UP:
                steps.append( AlignmentStep(
                    original_index=i - 1,
                    revised_index=None,
                    original_word=seq1[i - 1],
                    revised_word=None,
                    step_type=StepType.GAP_IN_REVISED
                ) );
                i -= 1;
            elif direction is Direction.LEFT:
                steps.append( AlignmentStep(
                    original_index=None,
                    revised_index=j - 1,
                    original_word=None,
                    revised_word=seq2[j - 1],
                    step_type=StepType.GAP_IN_ORIGINAL
                ) );
                j -= 1;
            else:
                # A positive score always records a predecessor
                raise ValueError( f"Cell ({i}, {j}) has score {score_matrix[i][j]} but no direction" );

        steps.reverse();
        return steps;

    def align( self, seq1: Sequence[str], seq2: Sequence[str] ) -> Tuple[MatrixResult, List[AlignmentStep]]:
        """Build the matrices and trace back from the best cell."""
        matrices = self.build_matrices( seq1, seq2 );
        steps = self.traceback(
            seq1,
            seq2,
            matrices.score_matrix,
            matrices.traceback_matrix,
            matrices.best_position
        );
        return matrices, steps;
