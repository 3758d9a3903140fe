"""Run the action with `python -m vercel_preview`."""

import sys

from .action import main

sys.exit(main())
