# SPDX-License-Identifier: Apache-2.0
# Copyright 2013-2024 The mlibtool development team

import argparse
import os
import sys
import traceback
import typing as T

from . import coredata, ltcompile, ltlink, mlog
from .ltlib import FallbackRequested, Invocation, MlibtoolException, Mode
from .runner import exec_libtool
from .sanity import check_lo_sanity, system_is_sane

USAGE = '''\
Use: mlibtool <target-libtool> [options] --mode=<mode> <command>
Options:
\t-n|--dry-run: display commands without modifying any files
\t--mode=<mode>: user operation mode <mode>

<mode> must be one of the following:
\tcompile: compile a source file into a libtool object
\tlink: create a library or an executable

mlibtool is a mini version of libtool for sensible systems. If you're
compiling for Linux or BSD with supported invocation commands,
<target-libtool> will never be called.

Unrecognized invocations will be redirected to <target-libtool>.'''


class OptionsError(Exception):
    pass


class OptionsParser(argparse.ArgumentParser):

    """Parser for the options between the target libtool and --mode=.

    Anything it does not understand makes the invocation one for the
    real libtool, so errors are raised instead of exiting.
    """

    def __init__(self) -> None:
        super().__init__(prog='mlibtool', add_help=False, allow_abbrev=False)
        self.add_argument('-n', '--dry-run', action='store_true')
        self.add_argument('--quiet', '--silent', dest='quiet', action='store_true')
        self.add_argument('--no-quiet', '--no-silent', dest='quiet', action='store_false')
        self.add_argument('--version', action='store_true')
        self.add_argument('-h', '--help', action='store_true')
        # Accepted for compatibility, without any effect
        self.add_argument('-v', '--verbose', '--no-verbose', dest='verbose', action='store_true')

    def error(self, message: str) -> T.NoReturn:
        raise OptionsError(message)


def split_argv(argv: T.Sequence[str]) -> T.Tuple[T.List[str], T.Optional[str], T.List[str]]:
    '''Split argv after the target libtool into the libtool options,
    the mode and the tool command.

    Only a --mode= followed by at least one argument ends the options.
    --tag=TAG options have no effect and are dropped here.
    '''
    for i in range(2, len(argv) - 1):
        if argv[i].startswith('--mode='):
            return _drop_tags(argv[2:i]), argv[i][len('--mode='):], list(argv[i + 1:])
    return _drop_tags(argv[2:]), None, []


def _drop_tags(args: T.Sequence[str]) -> T.List[str]:
    return [a for a in args if not a.startswith('--tag=')]


def print_usage() -> None:
    print(USAGE)


def setup_logging(quiet: bool) -> None:
    logdir = os.environ.get('MLIBTOOL_LOG_DIR')
    if logdir:
        mlog.initialize(logdir)
    if quiet:
        mlog.set_quiet()
    else:
        mlog.set_verbose()


def is_sane(inv: Invocation) -> bool:
    if inv.mode is Mode.COMPILE:
        return system_is_sane(inv.cmd[0])
    if inv.mode is Mode.LINK:
        return check_lo_sanity(inv.cmd, inv.cmd[0])
    return False


def dispatch(inv: Invocation, insane: T.Optional[str] = None) -> int:
    try:
        if insane:
            raise FallbackRequested(insane)
        if not is_sane(inv):
            raise FallbackRequested(f'cannot handle {inv.mode.value} on this platform')
        if inv.mode is Mode.COMPILE:
            ltcompile.run(inv)
        else:
            ltlink.run(inv)
    except FallbackRequested as e:
        mlog.debug('Falling back to libtool:', e.reason)
        return exec_libtool(inv)
    return 0


def run(argv: T.Sequence[str]) -> int:
    prefix, mode, cmd = split_argv(argv)

    insane = None  # type: T.Optional[str]
    try:
        options, unknown = OptionsParser().parse_known_args(prefix)
    except OptionsError as e:
        # A value given to a flag, as in --help=x
        options, _ = OptionsParser().parse_known_args([])
        insane = f'invalid libtool options: {e}'
    else:
        if unknown:
            insane = 'unknown libtool options: ' + ' '.join(unknown)

    if options.version:
        print(coredata.package)
        return 0
    if options.help:
        print_usage()
        return 0
    if mode is None:
        print_usage()
        return 1

    inv = Invocation(argv, cmd, Mode.from_string(mode),
                     dry_run=options.dry_run, quiet=options.quiet)
    setup_logging(inv.quiet)
    mlog.debug('Running', repr(inv))
    try:
        return dispatch(inv, insane)
    except MlibtoolException as e:
        mlog.exception(e)
        logfile = mlog.shutdown()
        if logfile is not None:
            mlog.log('A full log can be found at', mlog.bold(logfile))
        if os.environ.get('MLIBTOOL_FORCE_BACKTRACE'):
            raise
        return 1
    except Exception:
        if os.environ.get('MLIBTOOL_FORCE_BACKTRACE'):
            raise
        traceback.print_exc()
        return 2
    finally:
        mlog.shutdown()


def main() -> int:
    return run(sys.argv)


if __name__ == '__main__':
    sys.exit(main())
