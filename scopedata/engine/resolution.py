# scopedata/engine/resolution.py
"""
Choosing a decimation level of a hierarchical channel for one request.

The rule: take the coarsest level that still holds at least `max_points`
samples across the requested span, so the resampler never has to invent
points and never reads more than it needs. When even the finest level has
fewer samples than requested, the finest level is used and passed through
unchanged.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from ..core.channel import HierarchicalChannel
from ..core.hierarchy import Resolution

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Selection:
    channel_id: str
    resolution: Resolution
    points_in_span: float
    coordinated: bool = False

    @property
    def name(self) -> str:
        return self.resolution.name

    @property
    def decimation_factor(self) -> int:
        return self.resolution.decimation_factor


class ResolutionSelector:
    def select(
        self,
        channel: HierarchicalChannel,
        start: float,
        end: float,
        max_points: int,
    ) -> Selection:
        span = max(0.0, end - start)
        rate = channel.sampling_rate

        chosen = channel.resolutions.finest
        for level in channel.resolutions:  # finest first
            if level.points_over(span, rate) >= max_points:
                chosen = level
            else:
                break

        logger.debug(
            "Channel %s: %.3fs span, %d points -> %s (factor %d)",
            channel.id, span, max_points, chosen.name, chosen.decimation_factor,
        )
        return Selection(channel.id, chosen, chosen.points_over(span, rate))

    def select_aligned(
        self,
        channel: HierarchicalChannel,
        reference_factor: int,
        start: float,
        end: float,
        max_points: int,
    ) -> Selection:
        """
        Level matching a batch's reference decimation factor.

        Uses the exact factor when the channel has it, otherwise the nearest
        coarser level; a channel with neither selects on its own.
        """
        span = max(0.0, end - start)
        rate = channel.sampling_rate

        level = channel.resolutions.by_factor(reference_factor)
        if level is None:
            coarser = [r for r in channel.resolutions if r.decimation_factor > reference_factor]
            level = coarser[0] if coarser else None

        if level is None:
            logger.debug(
                "Channel %s has no level at or above factor %d; selecting independently",
                channel.id, reference_factor,
            )
            return self.select(channel, start, end, max_points)

        return Selection(channel.id, level, level.points_over(span, rate), coordinated=True)

    def available_levels(self, channel: HierarchicalChannel) -> list[dict]:
        rate = channel.sampling_rate
        return [
            {
                "name": level.name,
                "decimation_factor": level.decimation_factor,
                "point_count": level.point_count,
                "duration": level.point_count * level.decimation_factor / rate,
            }
            for level in channel.resolutions
        ]
