import sys

from supervise.main import main

sys.exit(main())
