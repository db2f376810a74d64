"""
成交量警报

阈值固定为 5 倍，比值严格大于阈值才触发。
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from connectors.binance.klines import VolumeSample

ALERT_RATIO_THRESHOLD = 5.0

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass
class AlertEvent:
    """成交量警报"""
    symbol: str
    sample: VolumeSample
    timestamp: datetime = field(default_factory=datetime.now)

    def format(self) -> str:
        return (
            f"⚠️ Volume Alert for {self.symbol}\n"
            f"Previous Hour Volume: {self.sample.prev_volume:.2f}\n"
            f"Current Hour Volume: {self.sample.curr_volume:.2f}\n"
            f"Volume Ratio: {self.sample.ratio:.2f}x\n"
            f"Time: {self.timestamp.strftime(TIME_FORMAT)}"
        )

    def __str__(self):
        return f"🔊 {self.symbol} 成交量 {self.sample.ratio:.2f}x | {self.sample.prev_volume:,.2f} → {self.sample.curr_volume:,.2f}"


def evaluate_sample(
    symbol: str,
    sample: Optional[VolumeSample],
    threshold: float = ALERT_RATIO_THRESHOLD,
) -> Optional[AlertEvent]:
    """比值超过阈值时返回 AlertEvent，等于阈值不触发"""
    # NaN 比值不满足 > 比较，不触发
    if sample is None or not sample.ratio > threshold:
        return None
    return AlertEvent(symbol=symbol, sample=sample)
