import time
import uuid


def generate_ticket_id() -> str:
    """
    Builds the display token attached to each successful classification.

    The token is NOT persisted and NOT guaranteed unique across processes.
    It is a millisecond timestamp plus a short random suffix so two
    consecutive requests in the same session never share it.

    Returns:
        str: Token such as 'tkt-1718031234567-9f2c'.
    """
    millis = int(time.time() * 1000)
    return f"tkt-{millis}-{uuid.uuid4().hex[:4]}"
