"""Allow ``python -m mathssr``."""

import sys

from mathssr.cli import main

sys.exit(main())
