"""Allow ``python -m qtizer``."""

import sys

from qtizer.cli import main

sys.exit(main())
