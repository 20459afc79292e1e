from typing import Optional

from tqdm import tqdm


# ANSI color codes for terminal output
class Colors:
    GREEN = "\033[92m"
    RED = "\033[91m"
    YELLOW = "\033[93m"
    RESET = "\033[0m"
    BOLD = "\033[1m"


class ProgressTracker:
    """tqdm bar for one pass. Ticks may arrive in any order."""

    def __init__(self, label: str) -> None:
        self.label = label
        self.bar: Optional[tqdm] = None

    def start(self, total: int) -> None:
        self.bar = tqdm(
            total=total,
            desc=f"Deleting {self.label}",
            unit="item",
            dynamic_ncols=True,
        )

    def tick(self) -> None:
        if self.bar is not None:
            self.bar.update(1)

    def write(self, message: str) -> None:
        tqdm.write(message)

    def close(self) -> None:
        if self.bar is not None:
            self.bar.close()
            self.bar = None
