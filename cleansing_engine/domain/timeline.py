"""Stage timeline event helpers for cleansing run diagnostics."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any


def domain_build_stage_event(
    stage: str,
    status: str,
    entity_type: str,
    details: dict[str, Any] | None = None,
) -> dict[str, object]:
    """Build one structured timeline event payload for a pipeline stage.

    Args:
        stage: Stage name (`normalize`, `infer_period_end`, `validate`, `report`).
        status: Stage status marker.
        entity_type: Entity type processed by the stage.
        details: Optional structured counters.

    Returns:
        dict[str, object]: JSON-compatible timeline event.
    """

    event_payload: dict[str, object] = {
        "stage": stage,
        "status": status,
        "entity_type": entity_type,
        "at_utc": datetime.now(timezone.utc).isoformat(),
    }
    if details is not None:
        event_payload["details"] = details
    return event_payload
