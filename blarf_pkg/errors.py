"""
Error hierarchy for Blarf.

Every failure a build can hit is raised as a subclass of BlarfError so the
command-line entry point can report it and exit non-zero:

    BlarfError
    ├── ConfigurationError    required setting missing or unusable
    ├── LoadError             articles directory or an article file unreadable
    └── SiteIOError           filesystem failure while staging or publishing
        └── CopyError         a single entry failed during recursive copy
"""


class BlarfError(Exception):
    """Base class for all Blarf errors."""


class ConfigurationError(BlarfError):
    """A required input is missing or cannot be resolved."""


class LoadError(BlarfError):
    """The articles directory or one of its files could not be loaded."""

    def __init__(self, message, path=None):
        super().__init__(message)
        self.path = path


class SiteIOError(BlarfError, OSError):
    """A filesystem operation failed while building or publishing the site."""

    def __init__(self, message, path=None, operation=None):
        BlarfError.__init__(self, message)
        self.path = path
        self.operation = operation

    def __str__(self):
        return self.args[0] if self.args else ''


class CopyError(SiteIOError):
    """Copying one entry of a directory tree failed."""

    def __init__(self, src, dest, reason=None):
        message = f"Cannot copy {src} to {dest}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, path=src, operation='copy')
        self.src = src
        self.dest = dest
