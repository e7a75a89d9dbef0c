"""
Test cases for the end-to-end realignment controller and its diagnostics.
"""
import pytest
from pathlib import Path
import sys

# Add src directory to path for testing
sys.path.insert( 0, str( Path( __file__ ).parent.parent / "src" ) );

from subrevise.align import ScoringConfig
from subrevise.sync import (
    SubtitleRealigner,
    calculate_edit_similarity,
    calculate_match_score,
    calculate_similarity
)

ORIGINAL_SRT = """1
00:00:01,000 --> 00:00:02,000
the quick

2
00:00:03,000 --> 00:00:04,000
brown fox
"""


@pytest.fixture
def subtitle_file( tmp_path ):
    path = tmp_path / "clip.srt";
    path.write_text( ORIGINAL_SRT, encoding="utf-8" );
    return path;


def write_revised( tmp_path, text: str ) -> Path:
    path = tmp_path / "revised.txt";
    path.write_text( text, encoding="utf-8" );
    return path;


class TestDiagnostics:
    """Test cases for output quality figures."""

    def test_match_score( self ):
        assert calculate_match_score( [ "a", "b", "c", "d" ], [ "a", "B.", "x" ] ) == 50;
        assert calculate_match_score( [], [ "a" ] ) == 0;

    def test_similarity_ignores_punctuation_and_case( self ):
        assert calculate_similarity( "Hello, world!", "hello world" ) == 100.0;
        assert calculate_similarity( "one two three four", "one two" ) == 50.0;

    def test_edit_similarity( self ):
        assert calculate_edit_similarity( "same text", "Same text." ) == 1.0;
        assert calculate_edit_similarity( "", "" ) == 1.0;
        assert calculate_edit_similarity( "abcd", "abcx" ) == pytest.approx( 0.75 );


class TestSubtitleRealigner:
    """Test cases for the full pipeline."""

    def test_run_writes_revised_subtitles( self, tmp_path, subtitle_file ):
        revised_file = write_revised( tmp_path, "hello the fast\nbrown fox" );
        updates = [];

        realigner = SubtitleRealigner(
            subtitle_file=subtitle_file,
            revised_file=revised_file,
            progress=lambda percent, message: updates.append( percent )
        );

        assert realigner.run() == True;
        assert realigner.segments == [ "hello the fast", "brown fox" ];
        assert updates == [ 0, 10, 50, 80, 100 ];

        output_file = tmp_path / "clip_revised.srt";
        assert output_file.exists();
        assert output_file.read_text( encoding="utf-8" ) == (
            "1\n00:00:01,000 --> 00:00:02,000\nhello the fast\n\n"
            "2\n00:00:03,000 --> 00:00:04,000\nbrown fox\n"
        );

        assert realigner.diagnostics.match_score == 100;
        assert realigner.diagnostics.similarity == 100.0;
        assert realigner.diagnostics.edit_similarity == 1.0;

    def test_revised_text_is_preprocessed( self, tmp_path, subtitle_file ):
        revised_file = write_revised( tmp_path, 'the "quick"\r\n\r\nbrown   fox' );

        realigner = SubtitleRealigner( subtitle_file=subtitle_file, revised_file=revised_file, dry_run=True );
        assert realigner.run() == True;
        assert realigner.segments == [ "the “quick”", "brown fox" ];

    def test_explicit_output_path( self, tmp_path, subtitle_file ):
        revised_file = write_revised( tmp_path, "the quick brown fox" );
        output_file = tmp_path / "out" / "final.srt";
        output_file.parent.mkdir();

        realigner = SubtitleRealigner(
            subtitle_file=subtitle_file,
            revised_file=revised_file,
            output_file=output_file
        );
        assert realigner.run() == True;
        assert output_file.exists();

    def test_dry_run_writes_nothing( self, tmp_path, subtitle_file ):
        revised_file = write_revised( tmp_path, "the quick brown fox" );

        realigner = SubtitleRealigner( subtitle_file=subtitle_file, revised_file=revised_file, dry_run=True );
        assert realigner.run() == True;
        assert not ( tmp_path / "clip_revised.srt" ).exists();
        assert [ entry.text for entry in realigner.revised_track.entries ] == [ "the quick", "brown fox" ];

    def test_no_usable_match_fails( self, tmp_path, subtitle_file ):
        revised_file = write_revised( tmp_path, "zzz qqq" );

        realigner = SubtitleRealigner( subtitle_file=subtitle_file, revised_file=revised_file );
        assert realigner.run() == False;
        assert not ( tmp_path / "clip_revised.srt" ).exists();

    def test_empty_revised_text_fails( self, tmp_path, subtitle_file ):
        revised_file = write_revised( tmp_path, "   \n" );

        realigner = SubtitleRealigner( subtitle_file=subtitle_file, revised_file=revised_file );
        assert realigner.run() == False;

    def test_missing_revised_file_fails( self, tmp_path, subtitle_file ):
        realigner = SubtitleRealigner( subtitle_file=subtitle_file, revised_file=tmp_path / "missing.txt" );
        assert realigner.run() == False;

    def test_debug_mode_reraises( self, tmp_path, subtitle_file ):
        revised_file = write_revised( tmp_path, "zzz qqq" );

        realigner = SubtitleRealigner( subtitle_file=subtitle_file, revised_file=revised_file, debug=True );
        with pytest.raises( RuntimeError ):
            realigner.run();

    def test_scoring_is_passed_through( self, tmp_path, subtitle_file ):
        revised_file = write_revised( tmp_path, "the fast brown fox" );
        scoring = ScoringConfig( match_score=2, mismatch_penalty=-5, gap_penalty=0 );

        realigner = SubtitleRealigner(
            subtitle_file=subtitle_file,
            revised_file=revised_file,
            scoring=scoring,
            dry_run=True
        );
        assert realigner.run() == True;
        assert realigner.result.best_score == 6;
        assert realigner.segments == [ "the fast", "brown fox" ];

    def test_vtt_output_keeps_format( self, tmp_path ):
        subtitle_file = tmp_path / "talk.vtt";
        subtitle_file.write_text(
            "WEBVTT\n\n00:00:01.000 --> 00:00:02.000\nthe quick\n\n00:00:03.000 --> 00:00:04.000\nbrown fox\n",
            encoding="utf-8"
        );
        revised_file = write_revised( tmp_path, "the quick red fox" );

        realigner = SubtitleRealigner( subtitle_file=subtitle_file, revised_file=revised_file );
        assert realigner.run() == True;

        output = ( tmp_path / "talk_revised.vtt" ).read_text( encoding="utf-8" );
        assert output == (
            "WEBVTT\n\n00:00:01.000 --> 00:00:02.000\nthe quick\n\n"
            "00:00:03.000 --> 00:00:04.000\nred fox\n"
        );


if __name__ == '__main__':
    pytest.main( [ __file__ ] );
