from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from src.orchestrator.operations import Operation


@dataclass
class BookingFlowState:
    operation: Operation = Operation.CREATE
    payload: Union[Dict[str, Any], List[Dict[str, Any]]] = field(default_factory=dict)
    credential: Optional[str] = None
    partner_id: Optional[str] = None
    booking_id: Optional[str] = None
    booking_uid: Optional[str] = None
    location_override: Optional[str] = None
    result: Any = None
    completed: bool = False
