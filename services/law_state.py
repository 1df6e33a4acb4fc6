"""
Law voting state machine.

    open --recount--> recount --complete--> closed
      ^                  |
      +------abort-------+

`vote` keeps a law `open`. Every other operation/status pair is either a
transition listed in TRANSITIONS or a refusal listed in REFUSALS.
"""

from typing import Dict, Tuple, Type

from models.law import LawStatus
from utils.error_handling import AlreadyRecountingError, LiquidLawError, VotingClosedError

VOTE = 'vote'
RECOUNT = 'recount'
COMPLETE = 'complete'
ABORT = 'abort'

TRANSITIONS: Dict[Tuple[LawStatus, str], LawStatus] = {
    (LawStatus.OPEN, VOTE): LawStatus.OPEN,
    (LawStatus.OPEN, RECOUNT): LawStatus.RECOUNT,
    (LawStatus.RECOUNT, COMPLETE): LawStatus.CLOSED,
    (LawStatus.RECOUNT, ABORT): LawStatus.OPEN,
}

REFUSALS: Dict[Tuple[LawStatus, str], Type[LiquidLawError]] = {
    (LawStatus.RECOUNT, RECOUNT): AlreadyRecountingError,
    (LawStatus.CLOSED, RECOUNT): VotingClosedError,
    (LawStatus.RECOUNT, VOTE): AlreadyRecountingError,
    (LawStatus.CLOSED, VOTE): VotingClosedError,
}


def next_status(status: LawStatus, operation: str) -> LawStatus:
    """
    Return the status `operation` moves a law in `status` to.

    Raises:
        AlreadyRecountingError: recount or vote while a recount is running
        VotingClosedError: recount or vote on a closed law
        LiquidLawError: any other pair, which no operation in the core performs
    """
    try:
        return TRANSITIONS[(status, operation)]
    except KeyError:
        pass

    refusal = REFUSALS.get((status, operation))
    if refusal is not None:
        raise refusal()
    raise LiquidLawError(f"Cannot {operation} a law in status {status.value}", 'INVALID_TRANSITION')


def required_status(operation: str) -> LawStatus:
    """Return the single status from which `operation` is legal."""
    for (status, op) in TRANSITIONS:
        if op == operation:
            return status
    raise LiquidLawError(f"Unknown operation {operation}", 'INVALID_TRANSITION')
