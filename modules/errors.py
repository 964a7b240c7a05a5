"""
Error types raised while creating, opening and re-packing EPUB workspaces.
"""


class EpubDirError(Exception):
    """Base class for every error the tool reports to the user."""


class AllocationError(EpubDirError):
    """The scratch root or a workspace inside it could not be created."""


class TemplateArityError(EpubDirError):
    """A template was rendered with the wrong number of slot values."""

    def __init__(self, template_name, expected, got):
        self.template_name = template_name
        self.expected = expected
        self.got = got
        super().__init__(
            f"Template '{template_name}' takes {expected} value(s), got {got}"
        )


class InvalidExtensionError(EpubDirError):
    """The target file carries an extension other than .epub."""

    def __init__(self, path, extension):
        self.path = path
        self.extension = extension
        super().__init__(f"Not an .epub file name: {path} (extension '{extension}')")


class SessionNotFoundError(EpubDirError):
    """No session binding was found above the given path."""


class PackagingCancelled(EpubDirError):
    """The user declined to overwrite and gave no other destination."""


class ToolFailure(EpubDirError):
    """
    An unpack or pack step failed, usually because the archiver exited with
    a non-zero status. log_path points at the tool log holding its output.
    """

    def __init__(self, message, returncode=None, log_path=None):
        self.returncode = returncode
        self.log_path = log_path
        details = []
        if returncode is not None:
            details.append(f"exit status {returncode}")
        if log_path:
            details.append(f"see {log_path}")
        if details:
            message = f"{message} ({', '.join(details)})"
        super().__init__(message)


class UnpackFailure(ToolFailure):
    pass


class PackagingFailure(ToolFailure):
    pass
