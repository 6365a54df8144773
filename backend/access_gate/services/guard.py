"""
Per-station scan guard.

A station processes one scan at a time. A scan read while the station is
busy is dropped (no decode, no audit record). The station stays busy after
the pipeline finishes until the operator acknowledges the outcome, so the
same badge cannot be processed twice before the result has been read.

Only the ``busy`` check-and-set guards the station. It runs without an
await in between, which is enough inside a single event loop.
"""
import logging
from typing import Dict, Optional

from access_gate.models.enums import PipelineState
from access_gate.schemas import Operator, ScanOutcome, StationStatus
from access_gate.services.pipeline import ScanPipeline

logger = logging.getLogger(__name__)


class ScanSessionGuard:
    def __init__(self, station_id: str, pipeline: ScanPipeline):
        self.station_id = station_id
        self.pipeline = pipeline
        self.busy = False
        self.state = PipelineState.IDLE
        self.last_outcome: Optional[ScanOutcome] = None
        self.dropped = 0

    def _set_state(self, state: PipelineState):
        self.state = state

    def try_acquire(self) -> bool:
        if self.busy:
            self.dropped += 1
            logger.debug(f"Station {self.station_id} busy, scan dropped")
            return False
        self.busy = True
        return True

    async def on_scan(
        self,
        raw: str,
        mode,
        direction,
        event_scope: Optional[str],
        operator: Operator,
    ) -> Optional[ScanOutcome]:
        """Process a scan, or return None when the station is busy"""
        if not self.try_acquire():
            return None

        try:
            outcome = await self.pipeline.process_scan(
                raw, mode, direction, event_scope, operator, on_state=self._set_state
            )
        finally:
            self.state = PipelineState.AWAITING_ACK
        self.last_outcome = outcome
        return outcome

    def acknowledge(self) -> bool:
        """Operator dismissed the outcome; admit the next scan"""
        if not self.busy:
            return False
        if self.state is not PipelineState.AWAITING_ACK:
            # Pipeline still running; the outcome has not been shown yet
            return False
        self.busy = False
        self.state = PipelineState.IDLE
        return True

    def status(self) -> StationStatus:
        return StationStatus(station_id=self.station_id, busy=self.busy, last_outcome=self.last_outcome)


class StationRegistry:
    """Guards for every operator station of this process"""

    def __init__(self, pipeline: ScanPipeline):
        self.pipeline = pipeline
        self._stations: Dict[str, ScanSessionGuard] = {}

    def get(self, station_id: str) -> ScanSessionGuard:
        guard = self._stations.get(station_id)
        if guard is None:
            guard = ScanSessionGuard(station_id, self.pipeline)
            self._stations[station_id] = guard
            logger.info(f"📟 Station {station_id} opened")
        return guard

    def __len__(self):
        return len(self._stations)
