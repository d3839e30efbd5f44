"""Allow ``python -m trivia_ladder``."""

import sys

from .cli import main

sys.exit(main())
