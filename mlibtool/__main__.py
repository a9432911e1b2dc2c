# SPDX-License-Identifier: Apache-2.0
# Copyright 2013-2024 The mlibtool development team

import sys

from .ltmain import main

sys.exit(main())
