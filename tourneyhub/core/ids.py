"""
Application-level identifiers
"""

import time
import uuid

PLAYER_PREFIX = "ply_"
ORGANIZER_PREFIX = "org_"
TOURNAMENT_PREFIX = "trn_"
TRANSACTION_PREFIX = "txn_"
OPERATION_PREFIX = "op_"


def generate_id(prefix: str) -> str:
    """Random, roughly time-ordered id such as ``trn_3f9a1c2b7192b4c1e5a``"""
    return f"{prefix}{uuid.uuid4().hex[:9]}{int(time.time() * 1000):x}"
