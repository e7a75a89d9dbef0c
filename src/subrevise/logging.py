"""
Logging system for SubRevise with startup size check and Rich integration.
"""
import os
import logging
import shutil
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from rich.console import Console
from rich.logging import RichHandler

MAX_LOG_BYTES = 5 * 1024 * 1024;  # 5MB


class SubReviseLogger:
    """
    Logger for SubRevise with automatic log rotation and Rich display.

    Features:
    - 5MB size check on startup, rotates if exceeded
    - Rich console output with colors
    - File logging with rotation
    - INFO default, DEBUG with --debug flag
    """

    def __init__( self, name: str = "subrevise", debug: bool = False, logs_dir: Path = None ):
        self.name = name;
        self.debug_mode = debug;
        self.console = Console( stderr=True );

        if logs_dir is None:
            logs_dir = Path( os.getenv( "SUBREVISE_LOG_DIR", "logs" ) );
        self.logs_dir = Path( logs_dir );
        self.logs_dir.mkdir( parents=True, exist_ok=True );

        self.log_file = self.logs_dir / f"{name}.log";

        self._check_and_rotate_on_startup();
        self.logger = self._setup_logger();

    def _check_and_rotate_on_startup( self ):
        """Move an oversized log file aside under a timestamped name."""
        if self.log_file.exists():
            file_size = self.log_file.stat().st_size;
            if file_size > MAX_LOG_BYTES:
                timestamp = datetime.now().isoformat().replace( ":", "-" );
                backup_name = self.logs_dir / f"{self.name}.{timestamp}.log";

                shutil.move( str( self.log_file ), str( backup_name ) );
                self.console.print( f"Rotated log file to {backup_name}" );

    def _setup_logger( self ):
        """Setup logger with Rich console and file handlers."""
        level = logging.DEBUG if self.debug_mode else logging.INFO;
        logger = logging.getLogger( self.name );
        logger.setLevel( logging.DEBUG );
        logger.propagate = False;

        for handler in list( logger.handlers ):
            handler.close();
        logger.handlers.clear();

        console_handler = RichHandler(
            console=self.console,
            rich_tracebacks=True,
            show_time=True,
            show_path=self.debug_mode
        );
        console_handler.setLevel( level );
        console_handler.setFormatter( logging.Formatter( "%(message)s" ) );
        logger.addHandler( console_handler );

        file_handler = RotatingFileHandler(
            self.log_file,
            maxBytes=MAX_LOG_BYTES,
            backupCount=5,
            encoding="utf-8"
        );
        file_handler.setLevel( logging.DEBUG );
        file_handler.setFormatter( logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ) );
        logger.addHandler( file_handler );

        return logger;

    def set_console_level( self, level: int ):
        """Change the console threshold, e.g. to silence INFO output with --quiet."""
        for handler in self.logger.handlers:
            if isinstance( handler, RichHandler ):
                handler.setLevel( level );

    def debug( self, message, **kwargs ):
        self.logger.debug( message, **kwargs );

    def info( self, message, **kwargs ):
        self.logger.info( message, **kwargs );

    def warning( self, message, **kwargs ):
        self.logger.warning( message, **kwargs );

    def error( self, message, **kwargs ):
        self.logger.error( message, **kwargs );

    def critical( self, message, **kwargs ):
        self.logger.critical( message, **kwargs );


# Global logger instance
_logger = None;


def get_logger( debug: bool = False ) -> SubReviseLogger:
    """Get the global SubRevise logger instance."""
    global _logger;
    if _logger is None:
        _logger = SubReviseLogger( debug=debug );
    return _logger;


def setup_logging( debug: bool = False, logs_dir: Path = None ) -> SubReviseLogger:
    """(Re)build the global logger, e.g. once the --debug flag is known."""
    global _logger;
    _logger = SubReviseLogger( debug=debug, logs_dir=logs_dir );
    return _logger;
