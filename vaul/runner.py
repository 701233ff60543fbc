"""
Runs a saved command's content in the user's shell.

The content is handed to the shell verbatim (it is the user's own stored
command line) and the child inherits this process's stdin/stdout/stderr.
"""
import logging
import os
import subprocess
import sys
from typing import List, Optional

logger = logging.getLogger(__name__)

DEFAULT_POSIX_SHELL = "/bin/sh"


def shell_argv(command: str, shell: str = "", platform: Optional[str] = None) -> List[str]:
    """Build the argv that runs `command` through the host shell."""
    platform = platform or sys.platform
    if platform == "win32":
        return ["cmd.exe", "/c", command]
    shell = shell or os.environ.get("SHELL") or DEFAULT_POSIX_SHELL
    return [shell, "-c", command]


def execute_command(command: str, shell: str = "") -> int:
    """Run the command and wait for it. Returns the shell's exit code."""
    argv = shell_argv(command, shell)
    logger.debug(f"Executing via {argv[0]}: {command}")
    # Streams are not redirected: the child inherits our stdin/stdout/stderr
    result = subprocess.run(argv)
    return result.returncode
