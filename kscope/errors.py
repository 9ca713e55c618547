import logging
import sys

logger = logging.getLogger('kscope.errors')


class CompilerError(Exception):
    def __init__(self, message, line=None, column=None, file=None, hint=None):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column
        self.file = file
        self.hint = hint

    def __str__(self):
        loc = ""
        if self.file:
            loc += f"{self.file}:"
        if self.line:
            loc += f"{self.line}:"
        if self.column:
            loc += f"{self.column}:"

        if loc:
            text = f"{loc} {self.message}"
        else:
            text = self.message
        if self.hint:
            text += f" (hint: {self.hint})"
        return text


class Diagnostics:
    """Collects compiler errors and echoes them to a stream.

    Parser and code generator report problems here and hand back ``None``
    instead of raising, so a single bad construct never aborts the session.
    """

    def __init__(self, stream=None, file=None, quiet=False):
        self.stream = sys.stderr if stream is None else stream
        self.file = file
        self.quiet = quiet
        self.errors = []

    def error(self, message, line=None, column=None, hint=None):
        err = CompilerError(message, line, column, file=self.file, hint=hint)
        self.errors.append(err)
        logger.debug('diagnostic: %s', err)
        if not self.quiet:
            print(f"Error: {err}", file=self.stream)
        return None

    @property
    def has_errors(self):
        return bool(self.errors)

    def messages(self):
        return [err.message for err in self.errors]

    def clear(self):
        self.errors = []

    def raise_if_errors(self):
        if not self.errors:
            return
        if len(self.errors) == 1:
            raise self.errors[0]
        summary = "; ".join(str(err) for err in self.errors)
        raise CompilerError(f"{len(self.errors)} errors: {summary}", file=self.file)
