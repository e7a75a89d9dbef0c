"""
Basic test cases for SubRevise CLI functionality.
"""
import pytest
from pathlib import Path
from unittest.mock import Mock, patch
import sys
import os

# Add src directory to path for testing
sys.path.insert( 0, str( Path( __file__ ).parent.parent / "src" ) );

from subrevise.align import ScoringConfig
from subrevise.cli import SubReviseCLI, main


@pytest.fixture
def input_files( tmp_path ):
    """A two-cue SRT file and a revised transcript."""
    subtitle_file = tmp_path / "clip.srt";
    subtitle_file.write_text(
        "1\n00:00:01,000 --> 00:00:02,000\nthe quick\n\n2\n00:00:03,000 --> 00:00:04,000\nbrown fox\n",
        encoding="utf-8"
    );
    revised_file = tmp_path / "revised.txt";
    revised_file.write_text( "the fast brown fox", encoding="utf-8" );
    return subtitle_file, revised_file;


class TestSubReviseCLI:
    """Test cases for SubRevise CLI interface."""

    def test_cli_initialization( self ):
        """Test CLI object creation."""
        cli = SubReviseCLI();
        assert cli.parser is not None;
        assert cli.args is None;
        assert cli.logger is None;

    def test_argument_parsing_missing_required( self ):
        """Test CLI with missing required arguments."""
        cli = SubReviseCLI();

        with pytest.raises( SystemExit ):
            cli.parse_args( [] );

    def test_argument_parsing_valid( self, input_files ):
        """Test CLI with valid arguments and default scoring."""
        subtitle_file, revised_file = input_files;

        cli = SubReviseCLI();
        args = cli.parse_args( [
            '--subs', str( subtitle_file ),
            '--revised', str( revised_file ),
            '--debug'
        ] );

        assert args.subtitle == subtitle_file;
        assert args.revised == revised_file;
        assert args.debug == True;
        assert args.output is None;
        assert args.match_score == 2;
        assert args.mismatch_penalty == -1;
        assert args.gap_penalty == -1;

    def test_negative_penalties_on_command_line( self, input_files ):
        subtitle_file, revised_file = input_files;

        cli = SubReviseCLI();
        args = cli.parse_args( [
            '-s', str( subtitle_file ),
            '-r', str( revised_file ),
            '--mismatch-penalty', '-3',
            '--gap-penalty', '-2'
        ] );

        assert args.mismatch_penalty == -3;
        assert args.gap_penalty == -2;
        assert cli.get_scoring() == ScoringConfig( match_score=2, mismatch_penalty=-3, gap_penalty=-2 );

    def test_match_score_validation( self, input_files ):
        """Test match score validation."""
        subtitle_file, revised_file = input_files;
        cli = SubReviseCLI();

        with pytest.raises( SystemExit ):
            cli.parse_args( [
                '-s', str( subtitle_file ),
                '-r', str( revised_file ),
                '--match-score', '0'
            ] );

    def test_positive_penalty_validation( self, input_files ):
        subtitle_file, revised_file = input_files;
        cli = SubReviseCLI();

        with pytest.raises( SystemExit ):
            cli.parse_args( [
                '-s', str( subtitle_file ),
                '-r', str( revised_file ),
                '--gap-penalty', '1'
            ] );

    def test_file_validation( self, tmp_path ):
        """Test file existence validation."""
        cli = SubReviseCLI();

        with pytest.raises( SystemExit ):
            cli.parse_args( [
                '-s', str( tmp_path / 'nonexistent.srt' ),
                '-r', str( tmp_path / 'nonexistent.txt' )
            ] );

    def test_unsupported_extension( self, tmp_path, input_files ):
        _, revised_file = input_files;
        subtitle_file = tmp_path / "clip.ass";
        subtitle_file.write_text( "[Script Info]\n", encoding="utf-8" );

        cli = SubReviseCLI();
        with pytest.raises( SystemExit ):
            cli.parse_args( [ '-s', str( subtitle_file ), '-r', str( revised_file ) ] );

    def test_get_scoring( self ):
        cli = SubReviseCLI();
        cli.args = Mock();
        cli.args.match_score = 3;
        cli.args.mismatch_penalty = -2;
        cli.args.gap_penalty = -4;

        assert cli.get_scoring() == ScoringConfig( match_score=3, mismatch_penalty=-2, gap_penalty=-4 );


class TestEnvironmentLoading:
    """Test environment variable loading."""

    @patch.dict( os.environ, {
        'SUBREVISE_MATCH_SCORE': '3',
        'SUBREVISE_MISMATCH_PENALTY': '-2',
        'SUBREVISE_GAP_PENALTY': '-2'
    } )
    def test_environment_variable_loading( self ):
        """Test loading scoring defaults from environment variables."""
        cli = SubReviseCLI();
        cli._load_environment();

        assert cli.environment_defaults == {
            'match_score': 3,
            'mismatch_penalty': -2,
            'gap_penalty': -2
        };
        assert cli.environment_errors == [];

    def test_missing_environment_variables( self ):
        """Test handling of missing environment variables."""
        cli = SubReviseCLI();
        cli._load_environment();

        assert cli.environment_defaults == {
            'match_score': 2,
            'mismatch_penalty': -1,
            'gap_penalty': -1
        };

    @patch.dict( os.environ, { 'SUBREVISE_GAP_PENALTY': 'lots' } )
    def test_invalid_environment_value( self ):
        cli = SubReviseCLI();
        cli._load_environment();

        assert len( cli.environment_errors ) == 1;
        assert 'SUBREVISE_GAP_PENALTY' in cli.environment_errors[0];

    @patch.dict( os.environ, { 'SUBREVISE_GAP_PENALTY': 'lots' } )
    def test_invalid_environment_value_exits( self, input_files ):
        subtitle_file, revised_file = input_files;
        cli = SubReviseCLI();

        with pytest.raises( SystemExit ):
            cli.parse_args( [ '-s', str( subtitle_file ), '-r', str( revised_file ) ] );

    def test_flags_override_environment( self, monkeypatch, input_files ):
        subtitle_file, revised_file = input_files;
        monkeypatch.setenv( 'SUBREVISE_GAP_PENALTY', '-3' );

        cli = SubReviseCLI();
        args = cli.parse_args( [ '-s', str( subtitle_file ), '-r', str( revised_file ) ] );
        assert args.gap_penalty == -3;

        cli = SubReviseCLI();
        args = cli.parse_args( [ '-s', str( subtitle_file ), '-r', str( revised_file ), '--gap-penalty', '-1' ] );
        assert args.gap_penalty == -1;

    def test_dotenv_file_is_loaded( self, monkeypatch, tmp_path ):
        monkeypatch.chdir( tmp_path );
        ( tmp_path / ".env" ).write_text( "SUBREVISE_MATCH_SCORE=4\n", encoding="utf-8" );

        cli = SubReviseCLI();
        cli._load_environment();

        assert cli.environment_defaults['match_score'] == 4;


class TestMain:
    """Test the console entry point."""

    def test_main_writes_output( self, monkeypatch, input_files ):
        subtitle_file, revised_file = input_files;
        monkeypatch.setattr( sys, 'argv', [ 'subrevise', '-s', str( subtitle_file ), '-r', str( revised_file ), '-q' ] );

        main();

        output_file = subtitle_file.with_name( "clip_revised.srt" );
        assert output_file.exists();
        assert "the fast" in output_file.read_text( encoding="utf-8" );

    def test_main_exits_on_failure( self, monkeypatch, tmp_path, input_files ):
        subtitle_file, _ = input_files;
        revised_file = tmp_path / "unrelated.txt";
        revised_file.write_text( "zzz qqq", encoding="utf-8" );
        monkeypatch.setattr( sys, 'argv', [ 'subrevise', '-s', str( subtitle_file ), '-r', str( revised_file ), '-q' ] );

        with pytest.raises( SystemExit ) as excinfo:
            main();
        assert excinfo.value.code == 1;


if __name__ == '__main__':
    pytest.main( [ __file__ ] );
