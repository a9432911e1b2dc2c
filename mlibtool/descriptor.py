# SPDX-License-Identifier: Apache-2.0
# Copyright 2013-2024 The mlibtool development team

"""Libtool objects (.lo) and libraries (.la).

These are small text files standing in for the real build products,
which live in a .libs directory next to them. The first line of every
descriptor we write marks it as ours; GNU libtool's descriptors look
alike but never carry it.

The minimal .la format only has dlname and library_names, for a shared
object. On top of that a .la always names its static archive in
old_library, and one whose shared object was built for an -rpath also
records libdir.
"""

import os
import typing as T

from .coredata import package
from .ltlib import MlibtoolException, VersionTriple

SANE_HEADER = '# SYSTEM_IS_SANE'
PACKAGE_HEADER = f'# Generated by {package}'

LIBS_DIR = '.libs'
OBJECT_EXT = '.lo'
LIBRARY_EXT = '.la'
DESCRIPTOR_EXTS = (OBJECT_EXT, LIBRARY_EXT)

PIC_SUFFIX = '.sh.o'
NON_PIC_SUFFIX = '.st.o'


class SharedObjectNames(T.NamedTuple):
    soname: str
    longname: str
    linkname: str


class OutputLayout:

    """Artifact paths for a descriptor DIR/BASE.ext.

    Everything is built into DIR/.libs with fixed suffixes, tools and
    scripts outside of mlibtool depend on these exact names.
    """

    def __init__(self, outname: str):
        self.outname = outname
        self.outdir = os.path.dirname(outname)
        self.base = os.path.splitext(os.path.basename(outname))[0]
        self.libs_dir = os.path.join(self.outdir, LIBS_DIR)

    def libs_path(self, fname: str) -> str:
        return os.path.join(self.libs_dir, fname)

    @property
    def pic_object(self) -> str:
        return self.libs_path(self.base + PIC_SUFFIX)

    @property
    def non_pic_object(self) -> str:
        return self.libs_path(self.base + NON_PIC_SUFFIX)

    def object_for(self, pic: bool) -> str:
        return self.pic_object if pic else self.non_pic_object

    @property
    def static_archive(self) -> str:
        return self.libs_path(self.base + '.a')

    @property
    def shared_object(self) -> str:
        return self.libs_path(self.base + '.so')

    def shared_names(self, version: VersionTriple) -> SharedObjectNames:
        return SharedObjectNames(f'{self.base}.so.{version.major}',
                                 f'{self.base}.so.{version}',
                                 f'{self.base}.so')


def _write_descriptor(fname: str, fields: T.List[T.Tuple[str, str]]) -> None:
    lines = [SANE_HEADER, PACKAGE_HEADER]
    lines += [f"{key}='{value}'" for key, value in fields]
    try:
        with open(fname, 'w', encoding='utf-8') as f:
            f.write('\n'.join(lines) + '\n')
    except OSError as e:
        raise MlibtoolException(f'Could not write {fname}: {e.strerror}')


def write_libtool_object(layout: OutputLayout) -> None:
    # Paths are relative to the directory holding the .lo file
    _write_descriptor(layout.outname, [
        ('pic_object', os.path.join(LIBS_DIR, layout.base + PIC_SUFFIX)),
        ('non_pic_object', os.path.join(LIBS_DIR, layout.base + NON_PIC_SUFFIX)),
    ])


def write_libtool_library(layout: OutputLayout,
                          shared: T.Optional[SharedObjectNames] = None,
                          rpath: T.Optional[str] = None) -> None:
    fields = []  # type: T.List[T.Tuple[str, str]]
    if shared is not None:
        fields.append(('dlname', shared.soname))
        fields.append(('library_names', ' '.join([shared.longname, shared.soname, shared.linkname])))
    fields.append(('old_library', layout.base + '.a'))
    if shared is not None and rpath:
        fields.append(('libdir', rpath))
    _write_descriptor(layout.outname, fields)


def is_descriptor(fname: str) -> bool:
    return os.path.splitext(fname)[1] in DESCRIPTOR_EXTS


def has_sane_header(fname: str) -> bool:
    '''Whether fname was written by mlibtool.

    OSError is left to the caller, an unreadable descriptor says nothing
    about the platform.
    '''
    with open(fname, encoding='utf-8', errors='replace') as f:
        return f.readline() == SANE_HEADER + '\n'
