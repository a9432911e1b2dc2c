# SPDX-License-Identifier: Apache-2.0
# Copyright 2013-2024 The mlibtool development team

"""A library of random helper functionality."""
import os
import re
import shlex
import typing as T
from enum import Enum

from . import mlog


class MlibtoolException(Exception):
    '''Exceptions thrown by mlibtool'''


class UsageError(MlibtoolException):
    '''The libtool command line cannot be translated and is not worth a fallback'''


class BuildFailed(MlibtoolException):
    '''A native tool failed and the step may not be retried with libtool'''

    def __init__(self, cmd: T.List[str], returncode: T.Optional[int] = None):
        self.cmd = cmd
        self.returncode = returncode
        if returncode is None:
            msg = f'Could not run command: {join_args(cmd)}'
        else:
            msg = f'Command failed with status {returncode}: {join_args(cmd)}'
        super().__init__(msg)


class FallbackRequested(Exception):
    '''Raised to hand the original invocation over to the real libtool.

    This is not an error: it is how unsupported options, insane
    platforms and retryable build failures leave the translators.
    '''

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class Mode(Enum):
    UNKNOWN = 'unknown'
    COMPILE = 'compile'
    LINK = 'link'

    @classmethod
    def from_string(cls, name: str) -> 'Mode':
        try:
            return cls(name)
        except ValueError:
            return cls.UNKNOWN


class Invocation:

    """One libtool run.

    argv is the complete original command line, argv[0] being mlibtool
    itself and argv[1] the real libtool to fall back to. cmd is the tool
    command that followed --mode=. Translators never modify either list.
    """

    def __init__(self, argv: T.Sequence[str], cmd: T.Sequence[str],
                 mode: Mode = Mode.UNKNOWN, dry_run: bool = False,
                 quiet: bool = False):
        self.argv = tuple(argv)
        self.cmd = tuple(cmd)
        self.mode = mode
        self.dry_run = dry_run
        self.quiet = quiet

    @property
    def fallback_command(self) -> T.List[str]:
        return list(self.argv[1:])

    def __repr__(self) -> str:
        return '<Invocation {} {!r}{}{}>'.format(
            self.mode.value, list(self.cmd),
            ' dry-run' if self.dry_run else '',
            ' quiet' if self.quiet else '')


def quote_arg(arg: str) -> str:
    return shlex.quote(arg)


def join_args(args: T.Iterable[str]) -> str:
    return ' '.join([quote_arg(x) for x in args])


def get_tool_exelist(name: str, default: str) -> T.List[str]:
    '''Command for a native tool, overridable through the environment
    the same way make does it (AR, RANLIB, ...).'''
    value = os.environ.get(name)
    if value:
        return shlex.split(value)
    return [default]


class VersionTriple(T.NamedTuple):
    major: int
    minor: int
    revision: int

    def __str__(self) -> str:
        return f'{self.major}.{self.minor}.{self.revision}'


_VERSION_INFO_RE = re.compile(r'\s*([+-]?\d+):([+-]?\d+):([+-]?\d+)\s*')

def parse_version_info(value: str) -> VersionTriple:
    '''Convert a libtool current:revision:age triple into the
    major.minor.revision numbers used for the shared object names.

    Anything that is not three integers yields 0.0.0 instead of an error.
    '''
    m = _VERSION_INFO_RE.fullmatch(value)
    if not m:
        mlog.warning(f'Could not parse -version-info {value!r}, using 0:0:0')
        return VersionTriple(0, 0, 0)
    current, revision, age = (int(x) for x in m.groups())
    minor = min(age, current)
    return VersionTriple(current - minor, minor, revision)


def remove_if_exists(fname: str) -> None:
    try:
        os.unlink(fname)
    except FileNotFoundError:
        pass
    except OSError as e:
        raise MlibtoolException(f'Could not remove {fname}: {e.strerror}')


def ensure_dir(dirname: str) -> None:
    # A failure here surfaces as a failing compiler or linker later on.
    try:
        os.makedirs(dirname, exist_ok=True)
    except OSError as e:
        mlog.debug(f'Could not create {dirname}: {e.strerror}')
