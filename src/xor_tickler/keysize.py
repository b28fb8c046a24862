import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Optional

import structlog

from xor_tickler.bits import bit_distance
from xor_tickler.log import configure_default_logging
from xor_tickler.utils import BytesLike

log = structlog.get_logger()

DEFAULT_MIN_KEYSIZE = 1
DEFAULT_MAX_KEYSIZE = 40

# Score for sizes that can't be measured; sorts below every real score.
UNRANKED_SCORE = -math.inf

KeysizeCriterion = Callable[[BytesLike, int], float]


class KeysizeRangeError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class KeysizeCandidate:
    size: int
    score: float

    @property
    def ranked(self) -> bool:
        return self.score != UNRANKED_SCORE


def chunk_pairs(data: BytesLike, size: int):
    """
    Yield consecutive, non-overlapping pairs of full size-byte chunks.

    A short final chunk is dropped, and so is a last chunk without a partner.
    """
    pair_span = size * 2
    for start in range(0, len(data) - pair_span + 1, pair_span):
        yield data[start:start + size], data[start + size:start + pair_span]


def hamming_distance_score(ciphertext: BytesLike, size: int) -> float:
    """
    Inverse of the mean bit distance between chunk pairs, normalized by size.

    Higher means the size is more likely to be the key length. Ciphertext too
    short to give a single pair scores UNRANKED_SCORE; identical chunks
    (zero distance) score infinity.
    """
    distances_sum = 0
    pair_count = 0
    for first, second in chunk_pairs(ciphertext, size):
        distances_sum += bit_distance(first, second)
        pair_count += 1

    if pair_count == 0:
        return UNRANKED_SCORE

    normalized = distances_sum / pair_count / size
    if normalized == 0:
        return math.inf
    return 1 / normalized


def validate_range(min_size: int, max_size: int) -> None:
    if min_size < 1:
        raise KeysizeRangeError(f"Minimum keysize must be at least 1, got {min_size}")
    if max_size < min_size:
        raise KeysizeRangeError(
            f"Maximum keysize ({max_size}) must not be less than minimum ({min_size})"
        )


def estimate_keysizes(
    ciphertext: BytesLike,
    min_size: int = DEFAULT_MIN_KEYSIZE,
    max_size: int = DEFAULT_MAX_KEYSIZE,
    *,
    criterion: KeysizeCriterion = hamming_distance_score,
    workers: Optional[int] = None,
) -> List[KeysizeCandidate]:
    """
    Rank every keysize in [min_size, max_size], most likely first.

    Ties keep ascending size order. Scoring can be spread over a thread pool
    with workers > 1; the ranking is the same either way.
    """
    configure_default_logging()
    validate_range(min_size, max_size)
    sizes = range(min_size, max_size + 1)

    def score_size(size: int) -> KeysizeCandidate:
        score = float(criterion(ciphertext, size))
        if math.isnan(score):
            score = UNRANKED_SCORE
        log.debug("keysize scored", size=size, score=score)
        return KeysizeCandidate(size=size, score=score)

    if workers and workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            candidates = list(executor.map(score_size, sizes))
    else:
        candidates = [score_size(size) for size in sizes]

    # sorted() is stable with reverse=True, so equal scores stay in size order.
    return sorted(candidates, key=lambda c: c.score, reverse=True)
