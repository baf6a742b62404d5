# =============================================================================
# Kiosk Prize Wheel - Outcome Service seam
#
# The outcome service owns the prize decision (eligibility, which segment wins,
# ticket issue). The wheel only ever visualises what it returns. A real venue
# plugs its backend in behind OutcomeService; DemoOutcomeService stands in for
# it when the kiosk runs on its own.
# =============================================================================

import logging
import random
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Protocol

from wheel_config import TICKET_TTL_DAYS

log = logging.getLogger(__name__)


class OutcomeServiceError(RuntimeError):
    """The outcome service could not answer."""


@dataclass(frozen=True)
class SpinResult:
    segment_index: int
    amount: float
    barcode: str
    expires_at: Any
    ticket_id: Optional[str] = None

    @classmethod
    def from_payload(cls, payload):
        """Builds a result from the service's JSON body."""
        try:
            return cls(
                segment_index=int(payload["segment_index"]),
                amount=payload["amount"],
                barcode=str(payload["barcode"]),
                expires_at=payload["expires_at"],
                ticket_id=payload.get("ticket_id"),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise OutcomeServiceError(f"malformed spin result: {payload!r}") from e


@dataclass(frozen=True)
class SpinEligibility:
    can_spin: bool
    reason: str = ""
    segments: Optional[list] = None


class OutcomeService(Protocol):
    def spin_eligibility(self, customer_id) -> SpinEligibility: ...

    def spin_execute(self, customer_id) -> SpinResult: ...


@dataclass
class DemoOutcomeService:
    """
    Local outcome service: every customer may spin and each segment is equally likely.
    Set `pinned_index` to force the winner (test mode).
    """
    segments: list
    rng: random.Random = field(default_factory=random.Random)
    ticket_ttl: timedelta = field(default_factory=lambda: timedelta(days=TICKET_TTL_DAYS))
    pinned_index: Optional[int] = None
    now: Any = field(default=None, repr=False)

    def spin_eligibility(self, customer_id) -> SpinEligibility:
        if not self.segments:
            return SpinEligibility(can_spin=True, segments=None)
        return SpinEligibility(can_spin=True, segments=list(self.segments))

    def spin_execute(self, customer_id) -> SpinResult:
        if not self.segments:
            raise OutcomeServiceError("no active campaign")
        ordered = sorted(self.segments, key=lambda s: s.get("segment_order", 0) or 0)
        if self.pinned_index is not None:
            index = self.pinned_index
        else:
            index = self.rng.randrange(len(ordered))
        amount = ordered[index].get("amount", 0) if 0 <= index < len(ordered) else 0
        issued = self.now() if self.now else datetime.now(timezone.utc)
        result = SpinResult(
            segment_index=index,
            amount=amount,
            barcode=uuid.UUID(int=self.rng.getrandbits(128)).hex[:12].upper(),
            expires_at=issued + self.ticket_ttl,
            ticket_id=str(uuid.UUID(int=self.rng.getrandbits(128))),
        )
        log.info("Demo outcome for customer %s: segment %s, amount %s", customer_id, index, amount)
        return result
