"""Request signing for checksum-verified payment APIs"""

import base64
import hashlib
import json


def sign_request(payload: str, api_path: str, secret_key: str, key_index: str) -> str:
    """
    Build an X-VERIFY token.

    sha256(payload + api_path + secret_key) as lowercase hex, followed by
    "###" and the merchant key index. `payload` is empty for GET requests.
    """
    digest = hashlib.sha256(
        payload.encode("utf-8") + api_path.encode("utf-8") + secret_key.encode("utf-8")
    ).hexdigest()
    return f"{digest}###{key_index}"


def encode_payload(payload: dict) -> str:
    """Canonical base64 encoding of a JSON request body"""
    raw = json.dumps(payload, separators=(",", ":"), sort_keys=True)
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")
