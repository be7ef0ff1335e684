"""Allow ``python -m retail_sql``."""

import sys

from retail_sql.cli import main

sys.exit(main())
