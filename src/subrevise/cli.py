"""
CLI entry point for SubRevise with argument parsing and environment variable loading.
"""
import argparse
import logging
import os
import sys
from pathlib import Path
from dotenv import load_dotenv
from rich.progress import BarColumn, Progress, TextColumn

from . import __version__
from .align import DEFAULT_GAP_PENALTY, DEFAULT_MATCH_SCORE, DEFAULT_MISMATCH_PENALTY, ScoringConfig
from .logging import setup_logging
from .subtitles import DEFAULT_MAX_LINE_CHARS, SUPPORTED_FORMATS

SCORING_ENVIRONMENT = {
    "match_score": ( "SUBREVISE_MATCH_SCORE", DEFAULT_MATCH_SCORE ),
    "mismatch_penalty": ( "SUBREVISE_MISMATCH_PENALTY", DEFAULT_MISMATCH_PENALTY ),
    "gap_penalty": ( "SUBREVISE_GAP_PENALTY", DEFAULT_GAP_PENALTY )
};


class SubReviseCLI:
    """
    Command line interface for SubRevise.

    Scoring parameters come from command line flags, falling back to
    environment variables (optionally from a .env file) and then to the
    built-in defaults.
    """

    def __init__( self ):
        self.parser = self._create_parser();
        self.args = None;
        self.logger = None;
        self.environment_defaults = {};
        self.environment_errors = [];

    def _create_parser( self ):
        """Create argument parser with all SubRevise options."""
        parser = argparse.ArgumentParser(
            prog="subrevise",
            description="Carry revised transcript text onto the timing of an existing subtitle file",
            epilog="Environment variables: SUBREVISE_MATCH_SCORE, SUBREVISE_MISMATCH_PENALTY, " \
                   "SUBREVISE_GAP_PENALTY, SUBREVISE_LOG_DIR"
        );

        parser.add_argument(
            "--sub", "--subs", "--subtitle", "-s",
            required=True,
            type=Path,
            dest="subtitle",
            help="Path to the timed subtitle file (.srt, .sbv or .vtt)"
        );

        parser.add_argument(
            "--revised", "--text", "-r",
            required=True,
            type=Path,
            dest="revised",
            help="Path to a UTF-8 text file with the revised transcript"
        );

        parser.add_argument(
            "--output", "-o",
            type=Path,
            default=None,
            help="Output path (default: <subtitle>_revised.<ext> beside the input)"
        );

        # Scoring parameters, None means "use environment or default"
        parser.add_argument(
            "--match-score",
            type=int,
            default=None,
            help=f"Score for matching words (default: {DEFAULT_MATCH_SCORE})"
        );

        parser.add_argument(
            "--mismatch-penalty",
            type=int,
            default=None,
            help=f"Penalty for mismatched words (default: {DEFAULT_MISMATCH_PENALTY})"
        );

        parser.add_argument(
            "--gap-penalty",
            type=int,
            default=None,
            help=f"Penalty for inserted or deleted words (default: {DEFAULT_GAP_PENALTY})"
        );

        parser.add_argument(
            "--max-line-chars",
            type=int,
            default=DEFAULT_MAX_LINE_CHARS,
            help=f"Cue text longer than this is wrapped onto two lines (default: {DEFAULT_MAX_LINE_CHARS})"
        );

        # Mode flags
        parser.add_argument(
            "--debug",
            action="store_true",
            help="Enable debug mode with verbose output"
        );

        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Perform the alignment without writing the output file"
        );

        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Only show warnings and errors on the console"
        );

        parser.add_argument(
            "--version",
            action="version",
            version=f"%(prog)s {__version__}"
        );

        return parser;

    def _load_environment( self ):
        """Load scoring defaults from a .env file and the environment."""
        env_file = Path( ".env" );
        if env_file.exists():
            load_dotenv( env_file );

        self.environment_defaults = {};
        self.environment_errors = [];
        for name, ( variable, default ) in SCORING_ENVIRONMENT.items():
            raw_value = os.getenv( variable );
            if raw_value is None or raw_value.strip() == "":
                self.environment_defaults[name] = default;
                continue;
            try:
                self.environment_defaults[name] = int( raw_value );
            except ValueError:
                self.environment_errors.append( f"{variable} must be an integer, got: {raw_value!r}" );
                self.environment_defaults[name] = default;

    def _apply_scoring_defaults( self ):
        """Fill scoring flags that were not given on the command line."""
        for name in SCORING_ENVIRONMENT:
            if getattr( self.args, name ) is None:
                setattr( self.args, name, self.environment_defaults[name] );

    def _validate_arguments( self ):
        """Validate parsed arguments and environment setup."""
        errors = list( self.environment_errors );

        if not self.args.subtitle.exists():
            errors.append( f"Subtitle file not found: {self.args.subtitle}" );

        extension = self.args.subtitle.suffix.lower().lstrip( "." );
        if extension not in SUPPORTED_FORMATS:
            errors.append( f"Unsupported subtitle format, got: {self.args.subtitle.suffix or '(none)'}. " \
                           "Please use SRT, SBV, or VTT." );

        if not self.args.revised.exists():
            errors.append( f"Revised text file not found: {self.args.revised}" );

        if self.args.match_score <= 0:
            errors.append( "Match score must be positive" );

        if self.args.mismatch_penalty > 0:
            errors.append( "Mismatch penalty must be zero or negative" );

        if self.args.gap_penalty > 0:
            errors.append( "Gap penalty must be zero or negative" );

        if self.args.max_line_chars < 10:
            errors.append( "Maximum line length must be at least 10 characters" );

        return errors;

    def parse_args( self, argv=None ):
        """Parse command line arguments and validate configuration."""
        self.args = self.parser.parse_args( argv );

        self.logger = setup_logging( debug=self.args.debug );
        if self.args.quiet and not self.args.debug:
            self.logger.set_console_level( logging.WARNING );

        self._load_environment();
        self._apply_scoring_defaults();

        errors = self._validate_arguments();
        if errors:
            self.logger.error( "Configuration errors:" );
            for error in errors:
                self.logger.error( f"  - {error}" );
            sys.exit( 1 );

        self.logger.info( f"SubRevise v{__version__} starting..." );
        self.logger.info( f"Subtitles: {self.args.subtitle}" );
        self.logger.info( f"Revised text: {self.args.revised}" );
        self.logger.info( f"Debug mode: {self.args.debug}" );

        return self.args;

    def get_scoring( self ) -> ScoringConfig:
        """Build the scoring configuration from the parsed arguments."""
        return ScoringConfig(
            match_score=self.args.match_score,
            mismatch_penalty=self.args.mismatch_penalty,
            gap_penalty=self.args.gap_penalty
        );


def main():
    """Main entry point for the SubRevise CLI."""
    cli = SubReviseCLI();
    args = cli.parse_args();

    from .sync import SubtitleRealigner;

    progress_display = Progress(
        TextColumn( "{task.description}" ),
        BarColumn(),
        TextColumn( "{task.percentage:>3.0f}%" ),
        console=cli.logger.console,
        transient=True,
        disable=args.quiet
    );

    with progress_display:
        task = progress_display.add_task( "Lining things up nicely...", total=100 );

        def report( percent: int, message: str ):
            progress_display.update( task, completed=percent, description=message );

        realigner = SubtitleRealigner(
            subtitle_file=args.subtitle,
            revised_file=args.revised,
            output_file=args.output,
            scoring=cli.get_scoring(),
            max_line_chars=args.max_line_chars,
            debug=args.debug,
            dry_run=args.dry_run,
            progress=report
        );

        try:
            result = realigner.run();
        except KeyboardInterrupt:
            cli.logger.warning( "Interrupted by user" );
            sys.exit( 130 );
        except Exception as e:
            cli.logger.error( f"Unexpected error: {e}" );
            if args.debug:
                raise;
            sys.exit( 1 );

    if result:
        cli.logger.info( "Subtitle realignment completed successfully!" );
    else:
        cli.logger.error( "Subtitle realignment failed!" );
        sys.exit( 1 );


if __name__ == "__main__":
    main();
