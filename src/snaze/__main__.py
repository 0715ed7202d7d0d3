import sys

from snaze.cli import main

sys.exit(main())
