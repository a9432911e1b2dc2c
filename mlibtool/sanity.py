# SPDX-License-Identifier: Apache-2.0
# Copyright 2013-2024 The mlibtool development team

# A platform is sane when its compiler produces ELF objects that ar,
# ranlib and a GNU-style driver can turn into archives and versioned
# shared objects the conventional way. We ask the preprocessor instead
# of looking at the host, the compiler may well be a cross compiler.

import subprocess
import typing as T

from . import mlog
from .descriptor import has_sane_header, is_descriptor

SANE_TOKEN = 'SYSTEM_IS_SANE'

SANE_PLATFORMS = (
    '__linux__',
    # BSD family
    '__FreeBSD_kernel__', '__NetBSD__', '__OpenBSD__', '__DragonFly__',
    # GNU Hurd
    '__GNU__',
)

SANITY_CHECK = '#if {}\n{}\n#endif\n'.format(' || '.join(SANE_PLATFORMS), SANE_TOKEN)


def system_is_sane(cc: str) -> bool:
    '''Run the preprocessor of cc over SANITY_CHECK.

    Never raises, anything going wrong with the child means "not sane".
    '''
    try:
        p = subprocess.Popen([cc, '-E', '-'], stdin=subprocess.PIPE,
                             stdout=subprocess.PIPE, universal_newlines=True,
                             errors='replace')
    except OSError as e:
        mlog.debug(f'Could not run preprocessor {cc}: {e.strerror}')
        return False

    sane = False
    insane = False
    try:
        with p.stdin:
            p.stdin.write(SANITY_CHECK)
    except OSError as e:
        mlog.debug(f'Could not write to preprocessor {cc}: {e.strerror}')
        insane = True

    # Line by line, however the output happens to be chunked
    for line in p.stdout:
        if line.startswith(SANE_TOKEN):
            sane = True
    p.stdout.close()

    if p.wait() != 0:
        mlog.debug(f'Preprocessor {cc} exited with status {p.returncode}')
        insane = True

    mlog.debug('System is sane according to', cc + ':', str(sane and not insane))
    return sane and not insane


def check_lo_sanity(cmd: T.Sequence[str], cc: T.Optional[str] = None) -> bool:
    '''Decide sanity from the descriptors on a link command line.

    Objects built by mlibtool prove that the compile step found the
    platform sane. The first readable .lo or .la decides; when there is
    none the compiler is probed instead.
    '''
    for arg in cmd[1:]:
        if arg.startswith('-') or not is_descriptor(arg):
            continue
        try:
            sane = has_sane_header(arg)
        except OSError as e:
            mlog.debug(f'Could not read {arg}: {e.strerror}')
            continue
        mlog.debug('System is sane according to', arg + ':', str(sane))
        return sane

    if cc:
        return system_is_sane(cc)
    return False
