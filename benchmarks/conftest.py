"""Pytest configuration for benchmarks."""

import random

import pytest

from channel_lineup.programs import Program


@pytest.fixture
def large_pool():
    """Program pool of 15 shows plus a movie library."""
    rng = random.Random(1234)
    programs = []
    for show in range(15):
        for season in range(1, 5):
            for episode in range(1, 26):
                programs.append(
                    Program(
                        id=f"show{show}-s{season}e{episode}",
                        duration_ms=rng.randint(20, 45) * 60_000,
                        kind="episode",
                        group_key=f"show{show}",
                        season=season,
                        episode=episode,
                    )
                )
    for movie in range(200):
        programs.append(
            Program(id=f"movie{movie}", duration_ms=rng.randint(80, 150) * 60_000, kind="movie")
        )
    return programs
