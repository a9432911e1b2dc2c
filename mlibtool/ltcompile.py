# SPDX-License-Identifier: Apache-2.0
# Copyright 2013-2024 The mlibtool development team

"""libtool --mode=compile.

A libtool object foo.lo stands for two real objects: .libs/foo.sh.o,
built position independent for shared libraries, and .libs/foo.st.o
for static archives and programs.
"""

import os
import shutil
import typing as T

from . import mlog
from .descriptor import OBJECT_EXT, OutputLayout, write_libtool_object
from .linkers import GnuLikeCompiler
from .ltlib import Invocation, MlibtoolException, UsageError, ensure_dir, remove_if_exists
from .runner import spawn

# Driver options whose value is a separate argument. The value is not a
# source file even though it does not start with a dash.
COMPILER_PARAMS_WITH_ARGUMENT = frozenset([
    '-MF', '-MT', '-MQ',
    '-I', '-D', '-U',
    '-include', '-imacros', '-idirafter', '-iprefix', '-iquote',
    '-isysroot', '-isystem', '-iwithprefix', '-iwithprefixbefore',
    '-x', '-B', '-aux-info', '-dumpbase', '-dumpdir', '--param',
    '-Xassembler', '-Xpreprocessor', '-Xclang', '-mllvm',
])


class CompileOptions:

    """What a compile command line asks for, after libtool's own
    options have been taken out."""

    def __init__(self) -> None:
        self.command = []    # type: T.List[str]
        self.outname = None  # type: T.Optional[str]
        self.outname_pos = None  # type: T.Optional[int]
        self.source = None   # type: T.Optional[str]
        self.prefer_pic = False
        self.prefer_non_pic = False

    @property
    def build_pic(self) -> bool:
        return self._prefers(pic=True) or not self._prefers(pic=False)

    @property
    def build_non_pic(self) -> bool:
        return self._prefers(pic=False) or not self._prefers(pic=True)

    def _prefers(self, pic: bool) -> bool:
        # Asking for both is the same as asking for neither
        if self.prefer_pic and self.prefer_non_pic:
            return False
        return self.prefer_pic if pic else self.prefer_non_pic


def parse_compile_command(cmd: T.Sequence[str]) -> CompileOptions:
    opts = CompileOptions()
    opts.command.append(cmd[0])
    i = 1
    while i < len(cmd):
        arg = cmd[i]
        narg = cmd[i + 1] if i + 1 < len(cmd) else None

        if arg.startswith('-'):
            if arg == '-o' and narg is not None:
                opts.command.append(arg)
                opts.outname = narg
                opts.outname_pos = len(opts.command)
                opts.command.append(narg)
                i += 1
            elif arg in ('-prefer-pic', '-shared'):
                opts.prefer_pic = True
            elif arg in ('-prefer-non-pic', '-static'):
                opts.prefer_non_pic = True
            elif arg.startswith('-Wc,'):
                opts.command.append(arg[4:])
            elif arg == '-no-suppress':
                # accepted for compatibility, we never suppress output
                pass
            elif arg in COMPILER_PARAMS_WITH_ARGUMENT and narg is not None:
                opts.command += [arg, narg]
                i += 1
            else:
                opts.command.append(arg)
        else:
            opts.source = arg
            opts.command.append(arg)
        i += 1
    return opts


def check_output_name(outname: str) -> None:
    ext = os.path.splitext(outname)[1]
    if not ext:
        raise UsageError('--mode=compile used to compile an executable')
    if ext != OBJECT_EXT:
        raise UsageError(f'--mode=compile used to compile something other than a {OBJECT_EXT} file: {outname}')


def run(inv: Invocation) -> None:
    opts = parse_compile_command(inv.cmd)
    if opts.source is None:
        raise UsageError('--mode=compile with no input file')

    compiler = GnuLikeCompiler()
    command = opts.command
    if opts.outname is None:
        # Like libtool, the object ends up in the current directory
        opts.outname = os.path.splitext(os.path.basename(opts.source))[0] + OBJECT_EXT
        command += compiler.get_output_args(opts.outname)
        opts.outname_pos = len(command) - 1
    else:
        mlog.debug('Compiling into', opts.outname)
        check_output_name(opts.outname)

    layout = OutputLayout(opts.outname)
    if not inv.dry_run:
        ensure_dir(layout.libs_dir)

    build_pic, build_non_pic = opts.build_pic, opts.build_non_pic
    if build_non_pic:
        command[opts.outname_pos] = layout.non_pic_object
        spawn(inv, command)
    if build_pic:
        command = command + compiler.get_pic_args()
        command[opts.outname_pos] = layout.pic_object
        spawn(inv, command)

    # The link step always expects both objects
    if not inv.dry_run:
        if not build_pic:
            _link_object(layout.non_pic_object, layout.pic_object)
        elif not build_non_pic:
            _link_object(layout.pic_object, layout.non_pic_object)
        write_libtool_object(layout)


def _link_object(src: str, dst: str) -> None:
    remove_if_exists(dst)
    try:
        os.link(src, dst)
    except OSError as e:
        mlog.debug(f'Could not hard link {dst}: {e.strerror}, copying instead')
        try:
            shutil.copyfile(src, dst)
        except OSError as e:
            raise MlibtoolException(f'Could not copy {src} to {dst}: {e.strerror}')
