"""Option chain analytics."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from marketfeed.data.market_data import OptionChain


@dataclass(frozen=True)
class PutCallRatio:
    """Open-interest put/call ratio of a chain."""

    ratio: Decimal
    call_oi_total: int
    put_oi_total: int

    @property
    def is_bullish(self) -> bool:
        return self.ratio < 1


def put_call_ratio(chain: OptionChain) -> PutCallRatio:
    """Total put OI over total call OI; 0 when no calls carry open interest."""
    call_oi = sum(leg.open_interest for leg in chain.calls)
    put_oi = sum(leg.open_interest for leg in chain.puts)
    if call_oi == 0:
        ratio = Decimal("0.00")
    else:
        ratio = (Decimal(put_oi) / Decimal(call_oi)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return PutCallRatio(ratio=ratio, call_oi_total=call_oi, put_oi_total=put_oi)
