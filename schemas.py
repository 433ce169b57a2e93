"""
Schemas for the small-cap finance bot.
StockRecord: one extracted row of the dataset.
RunResult: transient outcome of one orchestrated run (never persisted).

Extensibility: from_dict ignores unknown keys.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import List, Optional


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# ------------------------------------------------------------------
# StockRecord: a ticker/company/market-cap triple pulled from prose
# ------------------------------------------------------------------

@dataclass(frozen=True)
class StockRecord:
    ticker: str = ""              # 1-5 uppercase letters
    company: str = ""             # normalized display name, max 50 chars
    market_cap: str = ""          # "$1.5B" (billions, <= 2.0)
    extracted_at: str = field(default_factory=_now)

    def to_dict(self) -> dict:
        return asdict(self)

    def to_row(self) -> List[str]:
        """Column order matches config.CSV_HEADER."""
        return [self.ticker, self.company, self.market_cap, self.extracted_at]

    @classmethod
    def from_dict(cls, d: dict) -> "StockRecord":
        known = {f for f in cls.__dataclass_fields__}
        return cls(**{k: v for k, v in d.items() if k in known})


# ------------------------------------------------------------------
# RunResult: what the scheduler and /run-now get back
# ------------------------------------------------------------------

@dataclass
class RunResult:
    success: bool = False
    stock_count: int = 0
    stocks: List[StockRecord] = field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def ok(cls, stocks: List[StockRecord]) -> "RunResult":
        return cls(success=True, stock_count=len(stocks), stocks=list(stocks))

    @classmethod
    def failed(cls, error: str) -> "RunResult":
        return cls(success=False, error=error)

    def to_dict(self) -> dict:
        result = {
            'success': self.success,
            'stock_count': self.stock_count,
            'stocks': [s.to_dict() for s in self.stocks],
        }
        if self.error is not None:
            result['error'] = self.error
        return result
