# scopedata/io/load.py
from __future__ import annotations

import logging
from pathlib import Path

from ..core import ArrayChannel, ChannelMeta, ChannelStore, CoreError, TimeSeries
from .mdf_reader import AsammdfReader

logger = logging.getLogger(__name__)


def load_mdf(path: str | Path) -> ChannelStore:
    """
    Read every numeric signal of an MDF recording into a ChannelStore.

    Channels get ids `channel_0`, `channel_1`, ... in file order and keep the
    signal name as label. Signals that cannot form a channel (non-numeric
    samples, unsorted timestamps) are skipped with a warning.
    """
    path = str(path)
    channels: list[ArrayChannel] = []

    with AsammdfReader(path) as reader:
        for raw in reader.list_signals():
            t, v = raw.load()
            try:
                ts = TimeSeries(time=t, values=v, unit=raw.unit, name=raw.name)
                ch = ArrayChannel(
                    id=f"channel_{len(channels)}",
                    series=ts,
                    meta=ChannelMeta(label=raw.name, unit=raw.unit, source=f"MDF:{raw.key}"),
                )
            except CoreError as e:
                logger.warning("Skipping MDF signal %s (%s): %s", raw.name, raw.key, e)
                continue
            channels.append(ch)

    store = ChannelStore.from_channels(channels, source=Path(path).name)
    logger.info("Loaded %d channels from %s", len(store), path)
    return store
