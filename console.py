import os

os.environ.setdefault("FORCE_COLOR", "1")  # Force color output in terminals


class Color:
    DARK_CYAN = "\033[36m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    END = "\033[0m"
