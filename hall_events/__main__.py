"""Allow `python -m hall_events`."""

import sys

from .cli import main

sys.exit(main())
