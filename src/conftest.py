import pytest
import structlog


# Shared English fixture: letters, spaces and the punctuation the text
# criterion knows about, so the right key scores a perfect ratio.
ENGLISH_PLAINTEXT = (
    b"The lighthouse keeper climbed the stairs every evening at dusk, counting the "
    b"steps as he went, although he had known the number for thirty years. At the top "
    b"he trimmed the wick, polished the great lens, and watched the ships slide past "
    b"the point on their way to the harbor. Some nights the fog rolled in so thick "
    b"that he could not see his own hand, and on those nights he sounded the horn "
    b"until morning. The sailors never knew his name, but they knew his light, and "
    b"that was enough for him. When the new automatic lamp arrived in the spring, he "
    b"packed his books and his kettle into a small wooden crate, locked the door "
    b"behind him, and walked down the hill without looking back. He said later that "
    b"the quiet was the hardest part, that he kept waking at midnight to check a "
    b"flame that was no longer his to tend."
)


@pytest.fixture
def english_plaintext() -> bytes:
    return ENGLISH_PLAINTEXT


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any logging configuration a CLI test applied."""
    yield
    structlog.reset_defaults()


# Six byte key whose bytes all differ from each other in several bits, so
# misaligned keysizes look clearly noisier than multiples of six.
SPREAD_KEY = bytes([0x0f, 0xf0, 0x33, 0xcc, 0x55, 0xaa])


@pytest.fixture
def spread_key() -> bytes:
    return SPREAD_KEY
