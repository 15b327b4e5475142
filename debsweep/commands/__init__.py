"""
Command implementations for debsweep.
"""

from debsweep.commands.clean import cmd_clean
from debsweep.commands.files import cmd_files
from debsweep.commands.registry import cmd_registry

__all__ = ["cmd_clean", "cmd_files", "cmd_registry"]
