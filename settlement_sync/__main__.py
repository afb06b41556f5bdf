import sys

from settlement_sync.main import main

sys.exit(main())
