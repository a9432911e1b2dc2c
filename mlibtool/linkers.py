# SPDX-License-Identifier: Apache-2.0
# Copyright 2012-2024 The mlibtool development team

"""Models of the native tools mlibtool drives.

Only the conventional ELF toolchain is modelled: a GNU-style compiler
driver that also runs the linker, ar and ranlib. Everything else is the
real libtool's business.
"""

import typing as T

from .ltlib import get_tool_exelist


class StaticLinker:

    def __init__(self, exelist: T.List[str]):
        self.exelist = exelist

    def get_exelist(self) -> T.List[str]:
        return self.exelist.copy()

    def get_std_link_args(self) -> T.List[str]:
        return []

    def get_output_args(self, target: str) -> T.List[str]:
        return []


class ArLinker(StaticLinker):

    def __init__(self, exelist: T.Optional[T.List[str]] = None):
        super().__init__(exelist or get_tool_exelist('AR', 'ar'))

    def get_std_link_args(self) -> T.List[str]:
        # Replace members, create the archive silently. The index is
        # written by ranlib afterwards.
        return ['rc']

    def get_output_args(self, target: str) -> T.List[str]:
        return [target]


class RanlibIndexer:

    def __init__(self, exelist: T.Optional[T.List[str]] = None):
        self.exelist = exelist or get_tool_exelist('RANLIB', 'ranlib')

    def get_index_command(self, archive: str) -> T.List[str]:
        return self.exelist + [archive]


class GnuLikeCompiler:

    """The compile side of a gcc/clang-like driver."""

    def get_output_args(self, target: str) -> T.List[str]:
        return ['-o', target]

    def get_pic_args(self) -> T.List[str]:
        # -DPIC is what GNU libtool defines for the shared variant too
        return ['-fPIC', '-DPIC']


class GnuLikeDynamicLinker:

    """The link side of a gcc/clang-like driver driving GNU ld, gold or lld.

    Arguments are given in driver form, linker only flags carry the
    -Wl, prefix.
    """

    def _apply_prefix(self, arg: T.Union[str, T.List[str]]) -> T.List[str]:
        if isinstance(arg, str):
            return ['-Wl,' + arg]
        return ['-Wl,' + a for a in arg]

    def get_output_args(self, outname: str) -> T.List[str]:
        return ['-o', outname]

    def get_search_args(self, dirname: str) -> T.List[str]:
        return ['-L' + dirname]

    def get_std_shared_lib_args(self) -> T.List[str]:
        return ['-shared']

    def get_soname_args(self, soname: str) -> T.List[str]:
        return self._apply_prefix('-soname,' + soname)

    def get_fully_static_args(self) -> T.List[str]:
        return ['-static']

    def export_dynamic_args(self) -> T.List[str]:
        return ['-rdynamic']

    def get_link_whole_for(self, args: T.List[str]) -> T.List[str]:
        if not args:
            return args
        return self._apply_prefix('--whole-archive') + args + self._apply_prefix('--no-whole-archive')
