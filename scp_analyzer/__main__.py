import sys

from scp_analyzer.main import main

sys.exit(main())
