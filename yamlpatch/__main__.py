import sys

from yamlpatch.cli import main

sys.exit(main())
