# scopedata/engine/bulk.py
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from ..core.channel import HierarchicalChannel
from .results import COMPUTATION_ERROR, BulkResult, ChannelError, EngineResult

if TYPE_CHECKING:
    from .service import DataAccessEngine

logger = logging.getLogger(__name__)


class BulkCoordinator:
    """
    Fan-out of single-channel requests over a list of channel ids.

    A failing channel becomes a ChannelError entry and the loop moves on;
    the batch itself always completes. Repeated ids are served once, in
    first-seen order. Validation of the id list (size, emptiness) belongs
    to the API boundary.
    """

    def __init__(self, engine: "DataAccessEngine") -> None:
        self._engine = engine

    def get_many(
        self,
        channel_ids: Iterable[str],
        start_time: float,
        end_time: float,
        max_points: int | None = None,
        *,
        coordinated: bool | None = None,
    ) -> BulkResult:
        ids = list(dict.fromkeys(channel_ids))
        if coordinated is None:
            coordinated = self._engine.config.coordinated_bulk
        if max_points is None:
            max_points = self._engine.config.default_max_points

        reference = self._reference_factor(ids, start_time, end_time, max_points) if coordinated else None
        out = BulkResult(requested=len(ids), coordinated=reference is not None)

        for cid in ids:
            result = self._guarded(
                cid,
                lambda: self._engine.get_resampled_data(
                    cid, start_time, end_time, max_points, align_to_factor=reference
                ),
            )
            self._record(out, cid, result)
            if result.success and result.data.resolution is not None:
                out.selected_resolutions[cid] = result.data.resolution

        logger.debug("Bulk request: %d ok, %d failed", out.successful, out.failed)
        return out

    def get_many_statistics(self, channel_ids: Iterable[str]) -> BulkResult:
        ids = list(dict.fromkeys(channel_ids))
        out = BulkResult(requested=len(ids))
        for cid in ids:
            result = self._guarded(cid, lambda: self._engine.get_channel_statistics(cid))
            self._record(out, cid, result)
        return out

    def _reference_factor(
        self, ids: list[str], start_time: float, end_time: float, max_points: int
    ) -> int | None:
        """Decimation factor chosen for the first hierarchical channel of the batch."""
        for cid in ids:
            channel = self._engine.store.get(cid)
            if isinstance(channel, HierarchicalChannel):
                start, end, _ = channel.time_range.clamp(start_time, end_time)
                selection = self._engine.selector.select(channel, start, end, max_points)
                logger.debug("Coordinating batch on %s (factor %d)", selection.name, selection.decimation_factor)
                return selection.decimation_factor
        return None

    @staticmethod
    def _guarded(channel_id: str, call) -> EngineResult:
        try:
            return call()
        except Exception as e:  # one channel must never abort the batch
            logger.exception("Unexpected failure for channel %s", channel_id)
            return EngineResult.fail(COMPUTATION_ERROR, f"Error processing channel {channel_id}: {e}")

    @staticmethod
    def _record(out: BulkResult, channel_id: str, result: EngineResult) -> None:
        if result.success:
            out.results[channel_id] = result.data
        else:
            out.errors.append(
                ChannelError(channel_id, result.error_kind or COMPUTATION_ERROR, result.error or "")
            )
