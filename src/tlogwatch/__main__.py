import sys

from tlogwatch.cli.main import main

sys.exit(main())
