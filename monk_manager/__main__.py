import sys

from monk_manager.cli.main import main

sys.exit(main())
