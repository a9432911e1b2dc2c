# SPDX-License-Identifier: Apache-2.0
# Copyright 2013-2024 The mlibtool development team

"""libtool --mode=link.

Depending on the output name this builds a program, or a libtool
library: a static archive in .libs and, when -rpath is given, a
versioned shared object with its symlinks next to it.
"""

import os
import typing as T

from . import mlog
from .descriptor import (
    LIBRARY_EXT, OBJECT_EXT, OutputLayout, SharedObjectNames, write_libtool_library,
)
from .linkers import ArLinker, GnuLikeDynamicLinker, RanlibIndexer
from .ltlib import (
    FallbackRequested, Invocation, MlibtoolException, VersionTriple,
    ensure_dir, parse_version_info, remove_if_exists,
)
from .runner import spawn

DEFAULT_OUTPUT = 'a.out'

# Options we would have to emulate, leave them to libtool
UNSUPPORTED_ARGS = frozenset([
    '-dlopen', '-dlpreopen', '-module', '-objectlist', '-precious-files-regex',
    '-release', '-shared', '-shrext', '-static', '-static-libtool-libs', '-weak',
])

# Meaningless for us, dropped together with their value
IGNORED_ARGS_WITH_VALUE = frozenset(['-bindir', '-export-symbols', '-export-symbols-regex'])

IGNORED_ARGS = frozenset(['-no-fast-install', '-no-install', '-no-undefined'])


class LinkTarget:

    """The translated link command and everything needed to run it."""

    def __init__(self, driver: str, outname: T.Optional[str]):
        self.linker = GnuLikeDynamicLinker()
        self.archiver = ArLinker()
        self.indexer = RanlibIndexer()

        self.outname = outname
        # Programs link the non-PIC objects, libraries the PIC ones
        self.build_library = outname is not None and os.path.splitext(outname)[1] == LIBRARY_EXT
        self.build_binary = not self.build_library

        self.command = [driver] + self.linker.get_search_args('.libs')
        self.outname_pos = None  # type: T.Optional[int]
        self.archive_members = []  # type: T.List[str]
        self.rpath = None  # type: T.Optional[str]
        self.version = VersionTriple(0, 0, 0)
        self.retry_if_fail = False
        self.unsupported = []  # type: T.List[str]

    @property
    def build_shared(self) -> bool:
        return self.build_library and self.rpath is not None

    def add_input(self, arg: str) -> None:
        self.command.append(arg)
        self.archive_members.append(arg)

    def add_search_dir(self, dirname: str) -> None:
        # The -L directory may hold .la files, whose libraries are in .libs
        self.command += self.linker.get_search_args(dirname)
        self.command += self.linker.get_search_args(os.path.join(dirname, '.libs'))

    def add_libtool_object(self, fname: str) -> None:
        self.add_input(OutputLayout(fname).object_for(pic=not self.build_binary))

    def add_libtool_library(self, fname: str) -> None:
        layout = OutputLayout(fname)
        self.command += self.linker.get_search_args(layout.libs_dir)
        name = layout.base[3:] if layout.base.startswith('lib') else layout.base
        lib_args = ['-l' + name]
        if not os.path.exists(layout.shared_object):
            # Only the archive exists. Pull it in entirely, and if the
            # linker does not like that libtool may know better.
            lib_args = self.linker.get_link_whole_for(lib_args)
            self.retry_if_fail = True
        self.command += lib_args


def parse_link_command(cmd: T.Sequence[str]) -> LinkTarget:
    # We need to know what is being built before reading the inputs, to
    # pick the right variant of each libtool object.
    outname = None
    for i, arg in enumerate(cmd[1:-1], start=1):
        if arg == '-o':
            outname = cmd[i + 1]
            break

    target = LinkTarget(cmd[0], outname)
    linker = target.linker
    i = 1
    while i < len(cmd):
        arg = cmd[i]
        narg = cmd[i + 1] if i + 1 < len(cmd) else None

        if arg.startswith('-'):
            if arg == '-all-static':
                target.command += linker.get_fully_static_args()
            elif arg == '-export-dynamic':
                target.command += linker.export_dynamic_args()
            elif arg == '-L' and narg is not None:
                target.add_search_dir(narg)
                i += 1
            elif arg.startswith('-L'):
                target.add_search_dir(arg[2:])
            elif arg == '-o' and narg is not None:
                target.command.append(arg)
                target.outname_pos = len(target.command)
                target.command.append(narg)
                i += 1
            elif arg == '-rpath' and narg is not None:
                target.rpath = narg
                i += 1
            elif arg == '-version-info' and narg is not None:
                target.version = parse_version_info(narg)
                i += 1
            elif arg.startswith('-Wc,'):
                target.command.append(arg[4:])
            elif arg in ('-Xcompiler', '-XCClinker') and narg is not None:
                target.command.append(narg)
                i += 1
            elif arg in UNSUPPORTED_ARGS:
                target.unsupported.append(arg)
            elif arg in IGNORED_ARGS_WITH_VALUE and narg is not None:
                i += 1
            elif arg in IGNORED_ARGS:
                pass
            else:
                target.command.append(arg)
        else:
            ext = os.path.splitext(arg)[1]
            if ext == OBJECT_EXT:
                target.add_libtool_object(arg)
            elif ext == LIBRARY_EXT:
                target.add_libtool_library(arg)
            else:
                target.add_input(arg)
        i += 1

    if target.outname is None:
        target.outname = DEFAULT_OUTPUT
        target.command += linker.get_output_args(DEFAULT_OUTPUT)
        target.outname_pos = len(target.command) - 1
    return target


def run(inv: Invocation) -> None:
    target = parse_link_command(inv.cmd)
    if target.unsupported:
        raise FallbackRequested('unsupported options: ' + ' '.join(target.unsupported))

    layout = OutputLayout(target.outname)
    if not inv.dry_run:
        ensure_dir(layout.libs_dir)

    if target.build_binary:
        spawn(inv, target.command, target.retry_if_fail)

    if target.build_library:
        build_static_archive(inv, target, layout)

    shared = None  # type: T.Optional[SharedObjectNames]
    if target.build_shared:
        shared = build_shared_object(inv, target, layout)

    if target.build_library and not inv.dry_run:
        write_libtool_library(layout, shared, target.rpath)


def build_static_archive(inv: Invocation, target: LinkTarget, layout: OutputLayout) -> None:
    archive = layout.static_archive
    if not inv.dry_run:
        # ar would keep members of objects that are gone from the library
        remove_if_exists(archive)
    ar = target.archiver
    spawn(inv, ar.get_exelist() + ar.get_std_link_args() + ar.get_output_args(archive) + target.archive_members,
          target.retry_if_fail)
    spawn(inv, target.indexer.get_index_command(archive), target.retry_if_fail)


def build_shared_object(inv: Invocation, target: LinkTarget, layout: OutputLayout) -> SharedObjectNames:
    names = layout.shared_names(target.version)
    sopath = layout.libs_path(names.soname)
    longpath = layout.libs_path(names.longname)
    linkpath = layout.libs_path(names.linkname)

    if not inv.dry_run:
        for f in (sopath, longpath, linkpath):
            remove_if_exists(f)

    # Linked under the soname and renamed afterwards
    command = list(target.command)
    command[target.outname_pos] = sopath
    command += target.linker.get_std_shared_lib_args()
    command += target.linker.get_soname_args(names.soname)
    spawn(inv, command, target.retry_if_fail)
    if inv.dry_run:
        return names

    try:
        os.rename(sopath, longpath)
    except OSError as e:
        raise MlibtoolException(f'Could not rename {sopath} to {longpath}: {e.strerror}')
    for path in (sopath, linkpath):
        try:
            os.symlink(names.longname, path)
        except OSError as e:
            raise MlibtoolException(f'Could not create symlink {path} -> {names.longname}: {e.strerror}')
    mlog.debug('Built shared object', longpath)
    return names
