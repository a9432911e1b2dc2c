# SPDX-License-Identifier: Apache-2.0
# Copyright 2013-2024 The mlibtool development team

version = '0.1.0'

# Printed by --version and written into every descriptor file.
package = f'libtool (mlibtool) {version}'
