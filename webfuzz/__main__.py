import sys

from webfuzz.cli.main import main

sys.exit(main())
