import decimal

from .base import WithTimestamps
from .id import AttemptID, OverrideID, UsageID


class RegradeOverride(WithTimestamps):
    override_id: OverrideID
    usage_id: UsageID
    slot: int
    attempt_id: AttemptID

    old_fraction: decimal.Decimal | None = None
    new_fraction: decimal.Decimal | None = None
    dry_run: bool = False
