from datetime import datetime, timedelta
from typing import Generator

import polars as pl

from composite_frame._utils import epoch
from composite_frame.frame import CompositeFrame


class Trades(
    CompositeFrame,
    columns=(
        ('ts', pl.Datetime(time_unit='us', time_zone='UTC')),
        ('symbol', pl.String),
        ('px', pl.Float64),
        ('qty', pl.Int64),
    ),
):
    ...


trade_time_step = timedelta(seconds=0.5)

symbols: tuple[str, ...] = ('BTC', 'ETH', 'SOL')


def trade_stream(
    n: int = 1_000,
    start_date: datetime = epoch,
    time_step: timedelta = trade_time_step,
) -> Generator[tuple[datetime, str, float, int], None, None]:
    if n <= 0:
        raise ValueError('n must be > 0')

    for i in range(n):
        yield (
            start_date + (time_step * i),
            symbols[i % len(symbols)],
            100.0 + (i % 7) * 0.25,
            (i * 37) % 11 + 1,
        )


def trades_frame(n: int = 1_000) -> Trades:
    ts, symbol, px, qty = zip(*trade_stream(n))
    return Trades(ts=ts, symbol=symbol, px=px, qty=qty)


def sample_frame() -> CompositeFrame:
    return CompositeFrame(
        x=[1, 2, 3],
        y=[4.0, 5.0, 6.0],
        z=['a', 'b', 'c'],
    )
