import sys

from portfolio_profit.main import main

sys.exit(main())
