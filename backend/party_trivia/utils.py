import random
import string
import time

ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits


def now_ts() -> float:
    return time.time()


def room_code(rng: random.Random, length: int = 6) -> str:
    return "".join(rng.choice(ROOM_CODE_ALPHABET) for _ in range(length))
