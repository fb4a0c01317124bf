import sys

from f1feeds.cli import main

sys.exit(main())
