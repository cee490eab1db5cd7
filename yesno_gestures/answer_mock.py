"""
Mock answer sink for trying out the engine without a question flow.
"""
from typing import List

from .types import FinalSignal


class MockAnswerSink:
    """Mock question-flow consumer that prints answers instead of acting on them."""

    def __init__(self):
        """Initialize the mock sink."""
        self.answers: List[FinalSignal] = []

    def on_answer(self, signal: FinalSignal) -> None:
        """Print and record a confirmed answer."""
        self.answers.append(signal)
        print(f"[MockAnswerSink] Answer: {signal.value.upper()} via {signal.gesture_type} "
              f"(call #{len(self.answers)})")

    @property
    def yes_count(self) -> int:
        return sum(1 for signal in self.answers if signal.value == "yes")

    @property
    def no_count(self) -> int:
        return sum(1 for signal in self.answers if signal.value == "no")

    def reset_counters(self) -> None:
        """Forget recorded answers."""
        self.answers.clear()
