"""Talks to the demo API: fetch sample ciphertexts and check recovered keys."""
import requests
import structlog

from xor_tickler.utils import b64_decode, b64_encode

log = structlog.get_logger()

DEFAULT_DEMO_URL = "http://127.0.0.1:8000"
REQUEST_TIMEOUT = 10


def fetch_demo_data(base_url: str, demo: str) -> bytes:
    """Fetch the demo ciphertext from the given demo endpoint."""
    endpoint = f"{base_url.rstrip('/')}/api/{demo}"
    response = requests.get(endpoint, timeout=REQUEST_TIMEOUT)
    if response.status_code != 200:
        raise ValueError(
            f"Failed to get {endpoint}: {response.status_code} {response.text}"
        )
    data = response.json()
    return b64_decode(data["ciphertext_b64"])


def submit_key(base_url: str, demo: str, key: bytes) -> bool:
    """Ask the demo API whether the recovered key decrypts the demo ciphertext."""
    payload = {
        "demo": demo,
        "key_b64": b64_encode(key),
    }

    try:
        url = f"{base_url.rstrip('/')}/api/validate"
        response = requests.post(url, json=payload, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as e:
        log.warning("key validation request failed", demo=demo, error=str(e))
        return False

    if response.status_code != 200:
        log.warning("key validation rejected", demo=demo, status=response.status_code)
        return False
    return bool(response.json().get("valid", False))
