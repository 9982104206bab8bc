"""Test helpers: holdings text builder and scripted collaborators."""

from typing import Dict, List, Union

from portfolio_tracker.models.records import Quote


HEADER = "symbol,shares,costBasis,dateAdded"


def make_csv(*rows: str) -> str:
    """Build holdings text with the standard header."""
    return "\n".join([HEADER, *rows]) + "\n"


class FakePriceSource:
    """
    Price source answering from a dict.

    Values may be a Quote or an Exception instance to raise for that symbol.
    Unknown symbols raise KeyError. Every call is recorded in `calls`.
    """

    def __init__(self, answers: Dict[str, Union[Quote, Exception]]):
        self.answers = answers
        self.calls: List[str] = []
        self.closed = False

    async def fetch_quote(self, symbol: str) -> Quote:
        self.calls.append(symbol)
        answer = self.answers[symbol]
        if isinstance(answer, Exception):
            raise answer
        return answer

    async def aclose(self) -> None:
        self.closed = True


class SleepRecorder:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
