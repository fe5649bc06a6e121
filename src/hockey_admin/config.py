"""Static league configuration constants."""

import os

SAVE_VERSION = 1

DATA_FILE_ENV = "HOCKEY_ADMIN_DATA"
DEFAULT_DATA_FILE = "league_data.json"

DIVISIONS: tuple[str, ...] = ("A", "B")
POSITIONS: tuple[str, ...] = ("C", "LW", "RW", "D", "G")
GAME_STATUSES: tuple[str, ...] = ("scheduled", "in_progress", "completed")

WIN_POINTS = 2
TIE_POINTS = 1
SHOOTOUT_LOSS_POINTS = 1

SAVE_PCT_DECIMALS = 2

DEFAULT_VENUE = "Al Nasr Leisureland"
DEFAULT_GAME_TIME = "20:00"
DEFAULT_DAYS_BETWEEN_ROUNDS = 7
DEFAULT_WINDOW_DAYS = 7

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def data_file_path() -> str:
    return os.environ.get(DATA_FILE_ENV, DEFAULT_DATA_FILE)
