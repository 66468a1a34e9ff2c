"""Terminal rendering of tiered benchmark results."""
import sys
from typing import List, Optional, Sequence, TextIO

from speedrun.const import APP_DESCRIPTION, APP_TITLE, BYTES_PER_GIB, BYTES_PER_KIB, BYTES_PER_MIB
from speedrun.scoring import group_by_tier
from speedrun.shared.logging import BOLD, CYAN, DIM, GREEN, RED, RESET, YELLOW, use_color
from speedrun.shared.models import ScoredOutcome

COLUMNS = (("Model", 28), ("Host", 18), ("Size", 10), ("Params", 10), ("Tok/s", 10), ("TTFT", 10), ("Score", 8))
RULE_WIDTH = 90
GOOD_SCORE = 70
FAIR_SCORE = 40


def format_bytes(size_bytes: int) -> str:
    if size_bytes < BYTES_PER_MIB:
        return f"{size_bytes / BYTES_PER_KIB:.0f} KB"
    if size_bytes < BYTES_PER_GIB:
        return f"{size_bytes / BYTES_PER_MIB:.1f} MB"
    return f"{size_bytes / BYTES_PER_GIB:.1f} GB"


def pad_right(text: str, width: int) -> str:
    return text[:width] if len(text) >= width else text.ljust(width)


class ReportRenderer:
    """Writes the banner and per-tier result tables to a text stream."""

    def __init__(self, stream: Optional[TextIO] = None, color: Optional[bool] = None):
        self.stream = stream if stream is not None else sys.stdout
        self.color = use_color(self.stream) if color is None else color

    def _style(self, text: str, *codes: str) -> str:
        if not self.color:
            return text
        return f"{''.join(codes)}{text}{RESET}"

    def _write(self, line: str = "") -> None:
        self.stream.write(f"{line}\n")

    def banner(self) -> None:
        self._write()
        self._write(self._style(f"  {APP_TITLE}", BOLD, CYAN))
        self._write(self._style(f"  {APP_DESCRIPTION}", DIM))
        self._write()

    def score_color(self, score: float) -> str:
        if score >= GOOD_SCORE:
            return GREEN
        if score >= FAIR_SCORE:
            return YELLOW
        return RED

    def format_row(self, scored: ScoredOutcome, leader: bool) -> str:
        result = scored.outcome
        model = result.model
        cells = [
            pad_right(model.name, 28),
            pad_right(model.host.hostname, 18),
            pad_right(format_bytes(model.size_bytes), 10),
            pad_right(model.parameter_size, 10),
            pad_right(f"{result.tokens_per_second:.1f}", 10),
            pad_right(f"{result.time_to_first_token_ms:.0f}ms", 10),
        ]
        score = self._style(pad_right(f"{scored.composite_score:.0f}", 8), self.score_color(scored.composite_score))
        star = self._style("*", GREEN) if leader else " "
        return f"{star} {''.join(cells)}{score}"

    def render_tiers(self, scored: Sequence[ScoredOutcome]) -> List[str]:
        """Render one table per non-empty tier; returns the tier labels written."""
        written = []
        header = "".join(pad_right(title, width) for title, width in COLUMNS)
        rule = "─" * RULE_WIDTH

        for tier, entries in group_by_tier(scored).items():
            self._write()
            self._write(self._style(f"  {tier.value}", BOLD, CYAN))
            self._write(self._style(f"  {rule}", DIM))
            self._write(f"  {self._style(header, BOLD)}")
            self._write(self._style(f"  {rule}", DIM))
            for index, entry in enumerate(entries):
                self._write(self.format_row(entry, leader=index == 0))
            written.append(tier.value)
        self._write()
        return written
