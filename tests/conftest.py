from __future__ import annotations

import pytest

from polycracker.core.ngrams import NgramTable
from polycracker.core.utils import normalize_az

ENGLISH_SAMPLE = """
It was late in the afternoon when the messenger finally reached the old
harbour town. The rain had followed him along the coast road for most of the
day, and his coat was heavy with water by the time he found the inn near the
market square. He asked the keeper for a room and a fire, and then for paper
and ink, because the letter he carried had to be copied before the morning
tide. Nobody in the town knew what the letter said. The keeper thought it
concerned the price of grain, and the fishermen thought it was about the new
lighthouse that the council had promised them for many years. In truth the
letter was a warning. A ship that had left the northern port three weeks
before had not been seen since, and the owners believed that it had been
taken by men who wanted the cargo of silver hidden under the salt barrels.
The messenger worked through the night by the light of a single candle. He
wrote slowly and carefully, and every few lines he stopped to listen to the
wind against the shutters and the sound of the sea breaking on the stones
below the harbour wall. When the first grey light came over the water he
sealed the copy, paid the keeper, and walked down to the quay where a small
boat was waiting to carry him across the bay to the garrison on the other
side. The captain of the garrison read the letter twice and then sent riders
along the cliffs to watch for any sail that did not belong to the fleet.
"""

ENGLISH_LETTERS = normalize_az(ENGLISH_SAMPLE)


@pytest.fixture(scope="session")
def english_text() -> str:
    return ENGLISH_LETTERS


@pytest.fixture(scope="session")
def trigram_table() -> NgramTable:
    return NgramTable.from_text(ENGLISH_SAMPLE, 3)


@pytest.fixture(scope="session")
def trigram_counts() -> dict[str, int]:
    counts: dict[str, int] = {}
    for i in range(len(ENGLISH_LETTERS) - 2):
        g = ENGLISH_LETTERS[i:i + 3]
        counts[g] = counts.get(g, 0) + 1
    return counts
