#!/usr/bin/env python3
"""
Admin script to run or repair a law recount.

Usage:
    python3 scripts/manage_recount.py recount <law-pk>
    python3 scripts/manage_recount.py reset <law-pk>

`recount` resolves delegations into proxy votes and closes voting.
`reset` reopens a law left in the `recount` status by a recount that failed
and could not reopen it itself.
"""

import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app import create_app
from services.law_service import LawService
from utils.error_handling import LiquidLawError, create_error_response

ACTIONS = ('recount', 'reset')


def run(action: str, law_pk: int) -> int:
    """Run `action` on `law_pk` inside an app context; return a process exit code."""
    app = create_app()
    with app.app_context():
        service = LawService()
        try:
            if action == 'recount':
                law = service.recount(law_pk)
            else:
                law = service.reset_recount(law_pk)
        except LiquidLawError as e:
            response = create_error_response(e, law_id=law_pk)
            print(f"❌ {action} failed [{response['error_code']}]: {response['error']}")
            return 1

        print(f"✓ Law {law.law_id} is now {law.status.value}")
        print(f"  Tally: {law.tally()}")
        return 0


def main():
    if len(sys.argv) != 3 or sys.argv[1] not in ACTIONS or not sys.argv[2].isdigit():
        print("Usage: python3 scripts/manage_recount.py <recount|reset> <law-pk>")
        sys.exit(1)

    sys.exit(run(sys.argv[1], int(sys.argv[2])))


if __name__ == '__main__':
    main()
