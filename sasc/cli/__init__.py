"""
CLI entry points for SASC.
"""

from .main import main, build_parser, interpret_target
from .output_manager import OutputManager, VerbosityLevel
from .config_commands import config_cli

__all__ = [
    'main',
    'build_parser',
    'interpret_target',
    'OutputManager',
    'VerbosityLevel',
    'config_cli',
]
