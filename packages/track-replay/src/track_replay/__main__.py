# SPDX-License-Identifier: MIT
"""Allow running as python -m track_replay."""

import sys

from track_replay.cli import main

sys.exit(main())
