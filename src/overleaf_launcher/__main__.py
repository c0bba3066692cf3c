"""Allow ``python -m overleaf_launcher``."""

import sys

from overleaf_launcher.main import main

sys.exit(main())
