"""
Console output helpers.

stdout carries command results; everything diagnostic goes to stderr.
"""
import sys

# Global verbose flag
_VERBOSE = False


def set_verbose(value):
    """Set the global verbose flag."""
    global _VERBOSE
    _VERBOSE = value


def log(message):
    """Log informational messages to stderr."""
    print(f"\033[92m\033[1mINFO:\033[0m {message}", file=sys.stderr)


def debug_log(message, enabled=False):
    """Log a debug message to stderr if verbose mode (or `enabled`) is on."""
    if _VERBOSE or enabled:
        print(f"\033[94mDEBUG:\033[0m {message}", file=sys.stderr)


def error_log(message):
    print(f"\033[91m\033[1mERROR:\033[0m {message}", file=sys.stderr)
