"""Allow ``python -m pdfqa.cli`` execution."""

import sys

from pdfqa.cli.main import main

sys.exit(main())
