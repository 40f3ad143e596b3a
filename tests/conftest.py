import logging
import random

import pytest

from channel_lineup.config import get_settings
from channel_lineup.programs import Program

MINUTE = 60_000


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch, tmp_path):
    """Isolate settings from the developer's environment and config files."""
    for name in (
        "ITERATION_CAP",
        "SLACK_MS",
        "DEFAULT_PAD_MS",
        "DEFAULT_SEED",
        "DEFAULT_TIME_ZONE_OFFSET_MINUTES",
        "LOG_LEVEL",
        "LOG_FILE",
        "DEBUG",
    ):
        monkeypatch.delenv(f"LINEUP_{name}", raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def rng():
    """Seeded randomness source."""
    return random.Random(42)


@pytest.fixture
def five_movies():
    """The five-movie pool used in the end-to-end example."""
    durations = [5_776_799, 5_526_279, 6_308_448, 7_436_480, 5_053_010]
    return [
        Program(id=f"movie-{i}", duration_ms=d, kind="movie", title=f"Movie {i}")
        for i, d in enumerate(durations, start=1)
    ]


@pytest.fixture
def show_episodes():
    """Two shows of half-hour episodes plus one movie."""
    programs = []
    for show in ("bluey", "peppa"):
        for season in (1, 2):
            for episode in range(1, 4):
                programs.append(
                    Program(
                        id=f"{show}-s{season}e{episode}",
                        duration_ms=22 * MINUTE,
                        kind="episode",
                        group_key=show,
                        season=season,
                        episode=episode,
                    )
                )
    programs.append(Program(id="feature", duration_ms=95 * MINUTE, kind="movie.feature"))
    return programs


@pytest.fixture
def log_capture(caplog):
    """Capture package log records even when propagation is switched off."""
    logger = logging.getLogger("channel_lineup")
    previous = logger.propagate
    logger.propagate = True
    caplog.set_level(logging.DEBUG, logger="channel_lineup")
    yield caplog
    logger.propagate = previous
