"""Entry point for running journal_analytics as a module.

Usage:
    python -m journal_analytics [command] [options]

Commands:
    import      Import an exchange fill export into the journal
    import-csv  Add trades from a user CSV file
    export      Write the journal as CSV
    stats       Show performance statistics
    risk        Show circuit breaker and exposure status
    compliance  Show rule compliance and loss correlation
    verify      Verify data integrity

Examples:
    python -m journal_analytics import
    python -m journal_analytics stats --by strategy --save -f csv,xlsx
    python -m journal_analytics risk
"""

import sys

from journal_analytics.interfaces.cli import main

if __name__ == "__main__":
    sys.exit(main())
