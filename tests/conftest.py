"""
Shared fixtures: isolate log output and scoring environment variables per test.
"""
import sys
from pathlib import Path

import pytest

# Add src directory to path for testing
sys.path.insert( 0, str( Path( __file__ ).parent.parent / "src" ) );

import subrevise.logging


@pytest.fixture( autouse=True )
def isolated_environment( tmp_path, monkeypatch ):
    """Send logs to a temporary directory and clear SUBREVISE_* overrides."""
    monkeypatch.setenv( "SUBREVISE_LOG_DIR", str( tmp_path / "logs" ) );
    for variable in ( "SUBREVISE_MATCH_SCORE", "SUBREVISE_MISMATCH_PENALTY", "SUBREVISE_GAP_PENALTY" ):
        monkeypatch.delenv( variable, raising=False );
    monkeypatch.setattr( subrevise.logging, "_logger", None );
    yield;
