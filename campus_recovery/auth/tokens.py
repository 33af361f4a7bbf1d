import hashlib
import hmac
import time
from typing import Optional, Tuple, Union


def _sign(data: str, secret_key: str, encoding: str) -> str:
    return hmac.new(
        key=secret_key.encode(encoding),
        msg=data.encode(encoding),
        digestmod=hashlib.sha256
    ).hexdigest()


def generate_access_token(
    entity_id,
    secret_key: str,
    expiration: int,
    issued_at: Optional[int] = None,
    encoding: str = 'utf-8'
) -> Tuple[str, int]:
    """
    Create a session token for entity_id: "entity_id:timestamp:signature".

    Returns the token and the unix time at which it expires.
    """
    timestamp = str(int(time.time()) if issued_at is None else int(issued_at))
    signature = _sign(str(entity_id) + timestamp, secret_key, encoding)
    return f"{entity_id}:{timestamp}:{signature}", int(timestamp) + expiration


def validate_access_token(
    token,
    secret_key: str,
    expiration: int,
    now: Optional[int] = None,
    encoding: str = 'utf-8'
) -> Union[str, bool]:
    """Returns the entity_id of a valid, unexpired token and False otherwise."""
    try:
        entity_id, timestamp, signature = token.split(':')
        issued_at = int(timestamp)
    except (AttributeError, ValueError):
        return False
    current = int(time.time()) if now is None else int(now)
    if issued_at + expiration < current:
        return False
    expected_signature = _sign(entity_id + timestamp, secret_key, encoding)
    if hmac.compare_digest(signature, expected_signature):
        return entity_id
    return False
