import secrets
import string
import threading
from enum import Enum

import structlog

from xor_tickler.xor import xor_apply


log = structlog.get_logger()

KEY_ALPHABET = string.ascii_letters + string.digits


class Algorithm(str, Enum):
    XOR_SINGLE = "XOR-SINGLE-BYTE"
    XOR_REPEATING = "XOR-REPEATING-KEY"

    def __str__(self):
        return self.value


class Demo(str, Enum):
    DEMO1 = "demo1"
    DEMO2 = "demo2"
    DEMO3 = "demo3"

    def __str__(self):
        return self.value


PLAINTEXTS = {
    Demo.DEMO1: (
        "Meet me by the old lighthouse at dawn, and bring the spare lantern."
    ),
    Demo.DEMO2: (
        "The harbor was quiet that morning. Fishing boats rocked against the pier, "
        "their ropes creaking with every swell, and the gulls had not yet started "
        "their noisy search for breakfast. Down the hill, the baker was pulling the "
        "first loaves from the oven, and the smell of warm bread drifted over the "
        "rooftops toward the water. Nobody noticed the small gray boat slipping out "
        "past the breakwater, and by the time anyone thought to look, it was only a "
        "speck on the horizon, heading north with the tide."
    ),
    Demo.DEMO3: (
        "It was the kind of winter that made the whole valley hold its breath. Snow "
        "came early and stayed late, piling against fences until the fields looked "
        "like one long white sheet pulled tight over the hills. The river froze in "
        "places it had never frozen before, and the children from the village spent "
        "their afternoons sliding across it, daring each other to go a little farther "
        "from the bank each time. Their parents warned them, of course, but warnings "
        "are easy to forget when the ice is smooth and the sun is low and bright.\n"
        "Old Marta watched them from her kitchen window. She had lived in the valley "
        "for seventy years and had seen the river in every mood it had. She knew "
        "where the current ran fast beneath the surface, and she knew that the ice "
        "above it was thinner than it looked. Every morning she walked down to the "
        "water with a long wooden pole and tapped along the edge, listening for the "
        "hollow sound that meant danger. Where she heard it, she planted a red flag. "
        "The children laughed at her flags at first, but after a while they began "
        "to steer around them without thinking, the way you learn to step over a "
        "loose board on the stairs.\n"
        "When spring finally came, the ice broke apart with a noise like distant "
        "thunder, and the flags floated away downstream one by one. Nobody had fallen "
        "through all winter long. Marta never mentioned it, and neither did anyone "
        "else, but that summer the village left a basket of fresh strawberries on "
        "her doorstep every Sunday morning."
    ),
}

KEY_SIZES = {
    Demo.DEMO1: 1,
    Demo.DEMO2: 5,
    Demo.DEMO3: 13,
}

_KEYS: dict[Demo, bytes] = {}
_KEYS_LOCK = threading.Lock()


def algorithm_for(demo: Demo) -> Algorithm:
    if KEY_SIZES[demo] == 1:
        return Algorithm.XOR_SINGLE
    return Algorithm.XOR_REPEATING


def get_key(demo: Demo) -> bytes:
    """Returns the key for the given demo.
    Keys are generated on first use and kept for the life of the process."""
    with _KEYS_LOCK:
        key = _KEYS.get(demo)
        if key is None:
            match demo:
                case Demo.DEMO1 | Demo.DEMO2 | Demo.DEMO3:
                    key_size = KEY_SIZES[demo]
                case _:
                    raise ValueError(f"Invalid demo: {demo}")
            key = "".join(secrets.choice(KEY_ALPHABET) for _ in range(key_size)).encode("ascii")
            _KEYS[demo] = key
            log.info("demo key generated", demo=str(demo), key_len=len(key))
        return key


def get_plaintext(demo: Demo) -> bytes:
    return PLAINTEXTS[demo].encode("utf-8")


def encrypt_demo(demo: Demo) -> bytes:
    """Encrypt the demo's plaintext with the demo's key."""
    return xor_apply(get_plaintext(demo), get_key(demo))


def key_decrypts_demo(demo: Demo, key: bytes) -> bool:
    """True when key turns the demo ciphertext back into its plaintext.

    A key repeated to a multiple of its length decrypts just as well and counts
    as valid."""
    if not key:
        return False
    return xor_apply(encrypt_demo(demo), key) == get_plaintext(demo)
