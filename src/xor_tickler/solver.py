from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import partial, reduce
from typing import Callable, Iterator, List, Optional, Tuple

import structlog

from xor_tickler.criteria import Criterion, PrintableRatio, TextCharsetRatio, as_criterion
from xor_tickler.keysize import (
    DEFAULT_MAX_KEYSIZE,
    DEFAULT_MIN_KEYSIZE,
    KeysizeCriterion,
    estimate_keysizes,
    hamming_distance_score,
)
from xor_tickler.log import configure_default_logging
from xor_tickler.state_queue import SingleSlotQueue
from xor_tickler.state_snapshot import AttackSnapshot
from xor_tickler.utils import BytesLike
from xor_tickler.xor import xor_apply, xor_single

log = structlog.get_logger()

ColumnCallback = Callable[[int, "SingleByteResult"], None]


@dataclass(frozen=True, slots=True)
class SingleByteResult:
    key: int
    score: float
    plaintext: bytes

    def __repr__(self):
        return f"SingleByteResult(key={self.key:#04x}, score={self.score:.4f}, plaintext={self.plaintext!r})"


@dataclass(frozen=True, slots=True)
class RepeatedKeyResult:
    key: bytes
    plaintext: bytes

    @property
    def keysize(self) -> int:
        return len(self.key)


# Starting point of the brute-force fold. A trial has to beat it strictly, so a
# criterion that never scores above 0 leaves key 0 with an empty plaintext.
NO_RESULT = SingleByteResult(key=0, score=0.0, plaintext=b"")


def single_byte_trials(data: BytesLike, criterion: Criterion) -> Iterator[SingleByteResult]:
    """Decrypt data with every one-byte key, in ascending key order, and score each."""
    for key in range(256):
        plaintext = xor_single(data, key)
        yield SingleByteResult(key=key, score=criterion(plaintext), plaintext=plaintext)


def keep_better(best: SingleByteResult, trial: SingleByteResult) -> SingleByteResult:
    """Strict improvement only: on a tie the earlier (lower) key stays."""
    return trial if trial.score > best.score else best


def solve_single_byte(data: BytesLike, criterion: Criterion = PrintableRatio()) -> SingleByteResult:
    """Brute-force a single-byte XOR key, keeping the best scoring decryption."""
    criterion = as_criterion(criterion)
    return reduce(keep_better, single_byte_trials(data, criterion), NO_RESULT)


def transpose(ciphertext: BytesLike, keysize: int) -> List[bytes]:
    """Split ciphertext into keysize columns; column j holds every byte at position j mod keysize."""
    return [bytes(ciphertext[offset::keysize]) for offset in range(keysize)]


def recover_key(
    ciphertext: BytesLike,
    keysize: int,
    column_criterion: Criterion,
    *,
    workers: Optional[int] = None,
    on_column: Optional[ColumnCallback] = None,
) -> bytes:
    """
    Recover a keysize-byte key by solving each transposed column on its own.

    Columns don't check each other, so a wrong keysize still gives a key whose
    bytes each look locally plausible.
    """
    configure_default_logging()
    columns = transpose(ciphertext, keysize)
    solve = partial(solve_single_byte, criterion=column_criterion)

    if workers and workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(solve, columns))
    else:
        results = map(solve, columns)

    key = bytearray()
    for column_index, result in enumerate(results):
        key.append(result.key)
        log.debug("column solved", keysize=keysize, column=column_index, key_byte=result.key, score=result.score)
        if on_column is not None:
            on_column(column_index, result)
    return bytes(key)


class _ProgressPublisher:
    """Publishes attack snapshots to an optional queue."""

    def __init__(self, state_queue: Optional[SingleSlotQueue[AttackSnapshot]], ranked_keysizes: Tuple[int, ...]):
        self.state_queue = state_queue
        self.ranked_keysizes = ranked_keysizes
        self.state_version = 0
        self.keysize = 0
        self.candidate_index = 0
        self.key: List[Optional[int]] = []
        self.scores: List[Optional[float]] = []

    def start_candidate(self, candidate_index: int, keysize: int) -> None:
        self.candidate_index = candidate_index
        self.keysize = keysize
        self.key = [None] * keysize
        self.scores = [None] * keysize
        self.publish(column_index=0)

    def column_solved(self, column_index: int, result: SingleByteResult) -> None:
        self.key[column_index] = result.key
        self.scores[column_index] = float(result.score)
        self.publish(column_index=column_index)

    def finish(self, key: bytes) -> None:
        self.keysize = len(key)
        self.key = list(key)
        self.publish(column_index=len(key) - 1, complete=True)

    def publish(self, column_index: int, complete: bool = False) -> None:
        if self.state_queue is None:
            return
        self.state_version += 1
        snapshot = AttackSnapshot(
            state_version=self.state_version,
            complete=complete,
            keysize=self.keysize,
            candidate_index=self.candidate_index,
            candidate_count=len(self.ranked_keysizes),
            column_index=column_index,
            key=tuple(self.key),
            column_scores=tuple(self.scores),
            ranked_keysizes=self.ranked_keysizes,
        )
        self.state_queue.publish(snapshot)


def attack_repeated_key(
    ciphertext: BytesLike,
    min_size: int = DEFAULT_MIN_KEYSIZE,
    max_size: int = DEFAULT_MAX_KEYSIZE,
    keysizes_to_try: int = 1,
    column_criterion: Criterion = TextCharsetRatio(),
    *,
    keysize_criterion: KeysizeCriterion = hamming_distance_score,
    result_criterion: Optional[Criterion] = None,
    workers: Optional[int] = None,
    state_queue: Optional[SingleSlotQueue[AttackSnapshot]] = None,
) -> RepeatedKeyResult:
    """
    Recover a repeating XOR key and the plaintext it hides.

    The keysize estimate picks the candidate lengths. With keysizes_to_try
    above 1, each of the top candidates is solved and the one whose full
    plaintext scores best under result_criterion wins, ties going to the
    higher ranked size. If a state_queue is given, progress snapshots are
    published to it and the queue is closed when the attack ends.
    """
    try:
        if keysizes_to_try < 1:
            raise ValueError(f"keysizes_to_try must be at least 1, got {keysizes_to_try}")

        ciphertext = bytes(ciphertext)
        column_criterion = as_criterion(column_criterion)
        result_criterion = as_criterion(result_criterion or TextCharsetRatio())

        candidates = estimate_keysizes(
            ciphertext, min_size, max_size, criterion=keysize_criterion, workers=workers
        )
        tried = candidates[:keysizes_to_try]
        progress = _ProgressPublisher(state_queue, tuple(c.size for c in tried))

        best: Optional[RepeatedKeyResult] = None
        best_score = 0.0
        for candidate_index, candidate in enumerate(tried):
            progress.start_candidate(candidate_index, candidate.size)
            key = recover_key(
                ciphertext,
                candidate.size,
                column_criterion,
                workers=workers,
                on_column=progress.column_solved,
            )
            result = RepeatedKeyResult(key=key, plaintext=xor_apply(ciphertext, key))

            if len(tried) == 1:
                best = result
                break

            score = result_criterion(result.plaintext)
            log.debug("keysize candidate decrypted", keysize=candidate.size, key=key.hex(), score=score)
            if best is None or score > best_score:
                best, best_score = result, score

        log.info("repeated key recovered", keysize=best.keysize, key=best.key.hex())
        progress.finish(best.key)
        return best
    finally:
        if state_queue is not None:
            state_queue.close()
