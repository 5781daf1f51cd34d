import sys

from lumea_release.cli import main

sys.exit(main())
