# xerror.py - error types.

# All errors derive from ValueError, so that the `xx_run()` functions, which
# catch ValueError, report them and quit with a negative return code.


class JuncDiffError(ValueError):
    """Base class of the errors raised by juncdiff."""
    pass


class ConfigurationError(JuncDiffError):
    """Invalid run parameters, e.g., #groups differs from #files."""
    pass


class ParseError(JuncDiffError):
    """Malformed input file.

    Attributes
    ----------
    filename : str
        Path to the input file.
    line_no : int or None
        1-based line number; None if the error is not bound to a line.
    msg : str
        The error message.
    """
    def __init__(self, filename, line_no, msg):
        self.filename = filename
        self.line_no = line_no
        self.msg = msg
        if line_no is None:
            s = "%s: %s" % (filename, msg)
        else:
            s = "%s:%d: %s" % (filename, line_no, msg)
        super().__init__(s)


class InsufficientDataError(JuncDiffError):
    """A sample group is too small for the requested test."""
    pass
