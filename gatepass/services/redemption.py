# =======================================================================================
# gatepass/services/redemption.py - Redemption Engine (pure decision logic)
# =======================================================================================
from datetime import datetime, tzinfo
from ..models.enums import DenyReason, PassState
from ..models.schemas import PassRecord, Verdict
from ..utils.timeutils import ensure_utc, local_date, local_hhmm


class RedemptionEngine:
    """
    Decides GRANT / DENY for a pass at an instant. Never touches the store.

    Checks run in a fixed order and the first failure wins:
    used -> expired -> (no schedule: grant) -> calendar day -> time of day.
    A GRANT here is provisional; the registry's conditional consume has the last word.
    """

    def __init__(self, reference_tz: tzinfo):
        self.reference_tz = reference_tz

    def evaluate(self, record: PassRecord, now: datetime) -> Verdict:
        now = ensure_utc(now)

        if record.used:
            return self.already_used(record, record.used_at)

        if record.expires_at is not None and now > record.expires_at:
            return Verdict.deny(
                DenyReason.EXPIRED,
                f"Pass expired on {record.expires_at.isoformat()}",
                record,
                expires_at=record.expires_at,
            )

        if not record.is_scheduled:
            return Verdict.grant(record)

        today = local_date(now, self.reference_tz)
        event_day = record.active_date

        if today < event_day:
            if record.allow_early_access:
                # early access skips the time-of-day window too
                return Verdict.grant(record, "Access granted (early access)")
            return Verdict.deny(
                DenyReason.NOT_YET_ACTIVE,
                f"Pass is not active until {event_day.isoformat()}",
                record,
                active_date=event_day,
            )

        if today > event_day:
            return Verdict.deny(
                DenyReason.WINDOW_ELAPSED,
                f"Pass was only valid on {event_day.isoformat()}",
                record,
                active_date=event_day,
            )

        # zero-padded HH:MM compares correctly as text
        current_time = local_hhmm(now, self.reference_tz)
        if current_time < record.active_time:
            return Verdict.deny(
                DenyReason.TOO_EARLY,
                f"Too early: pass opens at {record.active_time} on {event_day.isoformat()}",
                record,
                active_time=record.active_time,
                active_date=event_day,
            )
        if current_time > record.end_time:
            return Verdict.deny(
                DenyReason.TOO_LATE,
                f"Too late: pass closed at {record.end_time} on {event_day.isoformat()}",
                record,
                end_time=record.end_time,
                active_date=event_day,
            )

        return Verdict.grant(record)

    @staticmethod
    def already_used(record: PassRecord, used_at) -> Verdict:
        when = used_at.isoformat() if used_at else "an earlier scan"
        return Verdict.deny(
            DenyReason.ALREADY_USED,
            f"Pass already used on {when}",
            record,
            used_at=used_at,
        )

    def state_of(self, record: PassRecord, now: datetime) -> PassState:
        """Lifecycle state at `now`; derived from the same checks as evaluate()."""
        if record.used:
            return PassState.REDEEMED
        verdict = self.evaluate(record, now)
        if verdict.granted:
            return PassState.ACTIVE
        if verdict.reason in (DenyReason.EXPIRED, DenyReason.WINDOW_ELAPSED):
            return PassState.EXPIRED
        return PassState.INACTIVE
