"""Multiple-choice option building.

Every option set holds the correct answer exactly once, no duplicates, and is
shuffled so the correct answer has no fixed position.
"""

import logging
import random
from collections.abc import Iterable

logger = logging.getLogger(__name__)


def _unique_distractors(correct: str, pool: Iterable[str]) -> list[str]:
    """Dedupe the pool (keeping first-seen order) and drop blanks and the answer."""
    return [x for x in dict.fromkeys(pool) if x and x != correct]


def build_options(
    correct: str,
    pool: Iterable[str],
    count: int = 4,
    rng: random.Random | None = None,
) -> list[str]:
    """Build a shuffled option list with one correct answer.

    Args:
        correct: The correct answer.
        pool: Candidate answers; may contain duplicates and the correct one.
        count: Desired number of options.
        rng: Random source (defaults to the module-level generator).

    Returns:
        ``count`` options, or fewer when the pool cannot supply enough
        unique distractors. The correct answer is always present once.
    """
    shuffle = rng.shuffle if rng else random.shuffle
    distractors = _unique_distractors(correct, pool)
    shuffle(distractors)

    options = [correct, *distractors[: max(0, count - 1)]]
    shuffle(options)
    return options


def options_are_valid(correct: str, options: list[str]) -> bool:
    return options.count(correct) == 1 and len(set(options)) == len(options)


def ensure_valid_options(
    correct: str,
    options: list[str],
    pool: Iterable[str],
    count: int = 4,
    question_id: str = "",
    rng: random.Random | None = None,
) -> list[str]:
    """Return ``options`` if it is a sound option set, otherwise a rebuilt one.

    A broken set (missing or repeated correct answer, duplicate distractors)
    is logged and replaced so the quiz never shows it.
    """
    if options_are_valid(correct, options):
        return options
    logger.warning(
        "Option set failed integrity check for %r (answer=%r, options=%r); rebuilding",
        question_id,
        correct,
        options,
    )
    return build_options(correct, [*options, *pool], count=count, rng=rng)
