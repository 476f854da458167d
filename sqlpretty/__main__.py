"""Entry point for `python -m sqlpretty`

Copyright (C) 2024 Alvin Zhang

This module is part of sqlpretty and is released under
the MIT License (see LICENSE)
"""

import sys

from .cli import main

sys.exit(main())
