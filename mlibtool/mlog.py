# SPDX-License-Identifier: Apache-2.0
# Copyright 2013-2024 The mlibtool development team

import os
import io
import sys
import typing as T

"""This is (mostly) a standalone module used to write logging
information about mlibtool runs. Console output goes to stderr, since
the stdout of a libtool invocation belongs to the build system. Debug
output only goes to the log file, if one was set up."""

def colorize_console() -> bool:
    _colorize_console = getattr(sys.stderr, 'colorize_console', None)  # type: T.Optional[bool]
    if _colorize_console is not None:
        return _colorize_console

    try:
        _colorize_console = os.isatty(sys.stderr.fileno()) and os.environ.get('TERM', 'dumb') != 'dumb'
    except Exception:
        _colorize_console = False

    try:
        sys.stderr.colorize_console = _colorize_console  # type: ignore[union-attr]
    except AttributeError:
        pass
    return _colorize_console

log_dir = None                  # type: T.Optional[str]
log_file = None                 # type: T.Optional[T.TextIO]
log_fname = 'mlibtool-log.txt'  # type: str
log_errors_only = False         # type: bool

def set_quiet() -> None:
    global log_errors_only  # pylint: disable=global-statement
    log_errors_only = True

def set_verbose() -> None:
    global log_errors_only  # pylint: disable=global-statement
    log_errors_only = False

def initialize(logdir: str) -> None:
    global log_dir, log_file  # pylint: disable=global-statement
    log_dir = logdir
    log_file = open(os.path.join(logdir, log_fname), 'a', encoding='utf-8')

def shutdown() -> T.Optional[str]:
    global log_file  # pylint: disable=global-statement
    if log_file is not None:
        path = log_file.name
        exception_around_goer = log_file
        log_file = None
        exception_around_goer.close()
        return path
    return None

class AnsiDecorator:
    plain_code = "\033[0m"

    def __init__(self, text: str, code: str, quoted: bool = False):
        self.text = text
        self.code = code
        self.quoted = quoted

    def get_text(self, with_codes: bool) -> str:
        text = self.text
        if with_codes and self.code:
            text = self.code + self.text + AnsiDecorator.plain_code
        if self.quoted:
            text = f'"{text}"'
        return text

    def __len__(self) -> int:
        return len(self.text)

    def __str__(self) -> str:
        return self.get_text(colorize_console())

TV_Loggable = T.Union[str, AnsiDecorator]
TV_LoggableList = T.List[TV_Loggable]

def bold(text: str, quoted: bool = False) -> AnsiDecorator:
    return AnsiDecorator(text, "\033[1m", quoted=quoted)

def red(text: str) -> AnsiDecorator:
    return AnsiDecorator(text, "\033[1;31m")

def yellow(text: str) -> AnsiDecorator:
    return AnsiDecorator(text, "\033[1;33m")

def process_markup(args: T.Sequence[TV_Loggable], keep: bool) -> T.List[str]:
    arr = []  # type: T.List[str]
    for arg in args:
        if arg is None:
            continue
        if isinstance(arg, str):
            arr.append(arg)
        elif isinstance(arg, AnsiDecorator):
            arr.append(arg.get_text(keep))
        else:
            arr.append(str(arg))
    return arr

def force_print(*args: str, **kwargs: T.Any) -> None:
    iostr = io.StringIO()
    kwargs['file'] = iostr
    print(*args, **kwargs)

    raw = iostr.getvalue()
    try:
        print(raw, end='', file=sys.stderr)
    except UnicodeEncodeError:
        cleaned = raw.encode('ascii', 'replace').decode('ascii')
        print(cleaned, end='', file=sys.stderr)
    sys.stderr.flush()

def debug(*args: TV_Loggable, **kwargs: T.Any) -> None:
    arr = process_markup(args, False)
    if log_file is not None:
        print(*arr, file=log_file, **kwargs)
        log_file.flush()

def log(*args: TV_Loggable, is_error: bool = False, **kwargs: T.Any) -> None:
    arr = process_markup(args, False)
    if log_file is not None:
        print(*arr, file=log_file, **kwargs)
        log_file.flush()
    if colorize_console():
        arr = process_markup(args, True)
    if not log_errors_only or is_error:
        force_print(*arr, **kwargs)

def _log_error(severity: str, *rargs: TV_Loggable, **kwargs: T.Any) -> None:
    from .ltlib import MlibtoolException

    if severity == 'warning':
        label = [yellow('WARNING:')]  # type: TV_LoggableList
    elif severity == 'error':
        label = [red('ERROR:')]
    else:
        raise MlibtoolException('Invalid severity ' + severity)
    # rargs is a tuple, not a list
    args = label + list(rargs)
    log(*args, **kwargs)

def error(*args: TV_Loggable, **kwargs: T.Any) -> None:
    return _log_error('error', *args, **kwargs, is_error=True)

def warning(*args: TV_Loggable, **kwargs: T.Any) -> None:
    return _log_error('warning', *args, **kwargs, is_error=True)

def exception(e: Exception, prefix: T.Optional[AnsiDecorator] = None) -> None:
    if prefix is None:
        prefix = red('ERROR:')
    args = []  # type: T.List[T.Union[AnsiDecorator, str]]
    if prefix:
        args.append(prefix)
    args.append(str(e))
    log(*args, is_error=True)
