"""
Subtitle container module for parsing and formatting SRT, SBV and VTT files.
"""
import io
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Sequence
import pysrt
import webvtt

from .logging import get_logger
from .text import tokenize

SUPPORTED_FORMATS = ( "srt", "sbv", "vtt" );
DEFAULT_MAX_LINE_CHARS = 50;

SBV_CUE_PATTERN = re.compile(
    r'(\d{1,2}:\d{2}:\d{2}\.\d{3}),(\d{1,2}:\d{2}:\d{2}\.\d{3})\r?\n([\s\S]*?)(?=\r?\n\r?\n|\Z)'
);


class SubtitleFormatError( ValueError ):
    """Raised when a subtitle file cannot be read as one of the supported formats."""


@dataclass
class SubtitleEntry:
    """Represents a single subtitle cue with timing and text."""

    index: int;              # 1-based cue number
    start_ms: int;           # Start time in milliseconds
    end_ms: int;             # End time in milliseconds
    text: str;               # Cue text flattened to one line
    original_lines: List[str] = field( default_factory=list );

    @property
    def words( self ) -> List[str]:
        return tokenize( self.text );

    def __repr__( self ):
        return f"SubtitleEntry(index={self.index}, start={self.start_ms}ms, text='{self.text[:30]}...')";


@dataclass
class SubtitleTrack:
    """A parsed subtitle file: its container format, VTT header and cues."""

    format: str;
    entries: List[SubtitleEntry];
    header: str = "";

    def word_counts( self ) -> List[int]:
        return [ len( entry.words ) for entry in self.entries ];

    def original_words( self ) -> List[str]:
        return [ word for entry in self.entries for word in entry.words ];

    def with_revised_text( self, segments: Sequence[str] ) -> "SubtitleTrack":
        """Copy of the track with each cue's text replaced, timing untouched."""
        entries = [];
        for position, entry in enumerate( self.entries ):
            text = segments[position] if position < len( segments ) else "";
            entries.append( replace( entry, text=text or "", original_lines=[] ) );
        return SubtitleTrack( format=self.format, entries=entries, header=self.header );


def timestamp_to_millis( timestamp: str ) -> int:
    """
    Convert an hh:mm:ss,mmm (or hh:mm:ss.mmm) timestamp to milliseconds.

    A missing hour field (mm:ss.mmm, allowed in VTT) is treated as zero.
    Anything else that does not split into four numeric parts yields 0.
    """
    parts = re.split( r'[:.,]', timestamp.strip() );
    if len( parts ) == 3:
        parts = [ "0" ] + parts;
    if len( parts ) != 4:
        return 0;

    try:
        hours, minutes, seconds, millis = ( int( part ) for part in parts );
    except ValueError:
        return 0;

    return hours * 3600000 + minutes * 60000 + seconds * 1000 + millis;


def millis_to_timestamp( millis: int, separator: str = "," ) -> str:
    """Format milliseconds as HH:MM:SS,mmm (SRT) or with another fraction separator."""
    return str( pysrt.SubRipTime.from_ordinal( millis ) ).replace( ",", separator );


def break_lines( text: str, max_chars: int = DEFAULT_MAX_LINE_CHARS ) -> List[str]:
    """
    Split long cue text into two lines near the middle.

    The space closest to the middle is used, the left one on a tie. Text
    with no space at all is cut at the middle.

    Args:
        text: Cue text on one line
        max_chars: Length above which the text is split

    Returns:
        One or two lines
    """
    if not text or len( text ) <= max_chars:
        return [ text ];

    middle = len( text ) // 2;
    left = text.rfind( " ", 0, middle + 1 );
    right = text.find( " ", middle );

    if left == -1 and right == -1:
        return [ text[:middle], text[middle:] ];

    if left == -1:
        split_index = right;
    elif right == -1:
        split_index = left;
    else:
        split_index = left if middle - left <= right - middle else right;

    return [ text[:split_index].strip(), text[split_index + 1:].strip() ];


class SubtitleProcessor:
    """
    Reads and writes subtitle tracks in SRT, SBV and VTT.

    Features:
    - Format chosen from the file extension
    - SRT through pysrt, VTT through webvtt-py, SBV through a block pattern
    - VTT header preserved verbatim for output
    - Two-line wrapping of long cue text on output
    """

    def __init__( self, max_line_chars: int = DEFAULT_MAX_LINE_CHARS ):
        self.logger = get_logger();
        self.max_line_chars = max_line_chars;

    def detect_format( self, subtitle_file: Path ) -> str:
        """Return the container format for a file, based on its extension."""
        extension = Path( subtitle_file ).suffix.lower().lstrip( "." );
        if extension not in SUPPORTED_FORMATS:
            raise SubtitleFormatError(
                f"Unsupported subtitle format '.{extension}'. Please use SRT, SBV, or VTT."
            );
        return extension;

    def parse_subtitle_file( self, subtitle_file: Path ) -> SubtitleTrack:
        """
        Parse a subtitle file into a SubtitleTrack.

        Args:
            subtitle_file: Path to an .srt, .sbv or .vtt file

        Returns:
            SubtitleTrack with at least one cue
        """
        subtitle_file = Path( subtitle_file );
        subtitle_format = self.detect_format( subtitle_file );

        if not subtitle_file.exists():
            raise SubtitleFormatError( f"Subtitle file not found: {subtitle_file}" );

        self.logger.info( f"Parsing {subtitle_format.upper()} file: {subtitle_file}" );

        content = subtitle_file.read_text( encoding="utf-8-sig" );
        track = self.parse_content( content, subtitle_format );

        if not track.entries:
            raise SubtitleFormatError( f"Invalid or empty {subtitle_format.upper()} file." );

        self.logger.info( f"Parsed {len( track.entries )} subtitle entries" );
        return track;

    def parse_content( self, content: str, subtitle_format: str ) -> SubtitleTrack:
        """Parse subtitle text already read into memory."""
        parsers = {
            "srt": self.parse_srt,
            "sbv": self.parse_sbv,
            "vtt": self.parse_vtt
        };
        if subtitle_format not in parsers:
            raise SubtitleFormatError( f"Unsupported subtitle format: {subtitle_format}" );
        return parsers[subtitle_format]( content );

    def parse_srt( self, content: str ) -> SubtitleTrack:
        subs = pysrt.from_string( content );

        entries = [];
        expected_index = 1;
        for sub in subs:
            index = sub.index if isinstance( sub.index, int ) else expected_index;
            lines = [ line for line in sub.text.splitlines() if line.strip() ];
            entries.append( SubtitleEntry(
                index=index,
                start_ms=sub.start.ordinal,
                end_ms=sub.end.ordinal,
                text=" ".join( sub.text.splitlines() ).strip(),
                original_lines=lines
            ) );
            expected_index = index + 1;

        return SubtitleTrack( format="srt", entries=entries );

    def parse_sbv( self, content: str ) -> SubtitleTrack:
        entries = [];
        for position, match in enumerate( SBV_CUE_PATTERN.finditer( content ), 1 ):
            text_block = match.group( 3 );
            entries.append( SubtitleEntry(
                index=position,
                start_ms=timestamp_to_millis( match.group( 1 ) ),
                end_ms=timestamp_to_millis( match.group( 2 ) ),
                text=re.sub( r'\r?\n', ' ', text_block ).strip(),
                original_lines=[ line for line in text_block.splitlines() if line.strip() ]
            ) );

        return SubtitleTrack( format="sbv", entries=entries );

    def parse_vtt( self, content: str ) -> SubtitleTrack:
        try:
            captions = webvtt.read_buffer( io.StringIO( content ) ).captions;
        except Exception as e:
            raise SubtitleFormatError( f"Failed to parse VTT content: {e}" ) from e;

        entries = [];
        for position, caption in enumerate( captions, 1 ):
            lines = [ line.strip() for line in caption.lines if line.strip() ];
            if not lines:
                continue;
            entries.append( SubtitleEntry(
                index=position,
                start_ms=timestamp_to_millis( caption.start ),
                end_ms=timestamp_to_millis( caption.end ),
                text=" ".join( lines ),
                original_lines=lines
            ) );

        # Cues without text are dropped, so renumber what is left
        for position, entry in enumerate( entries, 1 ):
            entry.index = position;

        return SubtitleTrack( format="vtt", entries=entries, header=self.extract_vtt_header( content ) );

    def extract_vtt_header( self, content: str ) -> str:
        """Return the VTT preamble: lines up to the first blank line or cue timing."""
        header_lines = [];
        for line in content.splitlines():
            stripped = line.strip();
            if stripped == "" and header_lines and header_lines[0].strip().startswith( "WEBVTT" ):
                break;
            if "-->" in stripped:
                break;
            header_lines.append( line );

        return "\n".join( header_lines ).strip();

    def format_track( self, track: SubtitleTrack ) -> str:
        """Render a track in its own container format."""
        formatters = {
            "srt": self.format_srt,
            "sbv": self.format_sbv,
            "vtt": self.format_vtt
        };
        return formatters[track.format]( track );

    def format_srt( self, track: SubtitleTrack ) -> str:
        blocks = [];
        for entry in track.entries:
            lines = break_lines( entry.text, self.max_line_chars );
            timing = f"{millis_to_timestamp( entry.start_ms )} --> {millis_to_timestamp( entry.end_ms )}";
            blocks.append( f"{entry.index}\n{timing}\n" + "\n".join( lines ) );
        return "\n\n".join( blocks ) + "\n";

    def format_sbv( self, track: SubtitleTrack ) -> str:
        blocks = [];
        for entry in track.entries:
            lines = break_lines( entry.text, self.max_line_chars );
            timing = f"{millis_to_timestamp( entry.start_ms, '.' )},{millis_to_timestamp( entry.end_ms, '.' )}";
            blocks.append( f"{timing}\n" + "\n".join( lines ) );
        return "\n\n".join( blocks ) + "\n";

    def format_vtt( self, track: SubtitleTrack ) -> str:
        header = track.header if track.header and track.header.strip() else "WEBVTT";
        blocks = [];
        for entry in track.entries:
            lines = break_lines( entry.text, self.max_line_chars );
            timing = f"{millis_to_timestamp( entry.start_ms, '.' )} --> {millis_to_timestamp( entry.end_ms, '.' )}";
            blocks.append( f"{timing}\n" + "\n".join( lines ) );
        return header + "\n\n" + "\n\n".join( blocks ) + "\n";

    def write_track( self, track: SubtitleTrack, output_file: Path ) -> Path:
        """Format a track and write it as UTF-8."""
        output_file = Path( output_file );
        output_file.write_text( self.format_track( track ), encoding="utf-8" );
        self.logger.info( f"Saved {len( track.entries )} cues to {output_file}" );
        return output_file;

    def get_track_stats( self, track: SubtitleTrack ) -> Dict:
        """Get statistics about a loaded track."""
        if not track.entries:
            return {};

        word_counts = track.word_counts();
        last_entry = max( track.entries, key=lambda x: x.end_ms );

        return {
            'total_entries': len( track.entries ),
            'total_words': sum( word_counts ),
            'empty_entries': sum( 1 for count in word_counts if count == 0 ),
            'duration_seconds': last_entry.end_ms / 1000.0,
            'format': track.format
        };


def revised_output_path( subtitle_file: Path ) -> Path:
    """Default output path: <stem>_revised<suffix> beside the input file."""
    subtitle_file = Path( subtitle_file );
    return subtitle_file.with_name( f"{subtitle_file.stem}_revised{subtitle_file.suffix}" );
