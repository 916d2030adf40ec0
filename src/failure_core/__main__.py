import sys

from failure_core.cli import main

sys.exit(main())
