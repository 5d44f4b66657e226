"""
statusbar_shell package.

Process-level helpers for the status bar shell runtime. The connectivity
and popup logic lives in the top-level ``core`` package; this package only
carries what the entry point needs before the Qt application exists.
"""

__all__ = [
    "logger",
]
