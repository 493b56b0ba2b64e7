"""
AcadCentral Department Portal
Exam and event calendar
"""

from typing import Any, Dict, List

from ..store import keys
from ..utils.helpers import generate_id, timestamp_sort_key, utc_now_iso
from .base import BaseService, Record


class CalendarService(BaseService):

    def get_exam_events(self) -> List[Record]:
        events = self._read(keys.EXAM_EVENTS)
        return sorted(events, key=lambda e: timestamp_sort_key(e.get("startDate")))

    def save_exam_event(self, event_data: Dict[str, Any], user: Record) -> Record:
        """A single-day event ends on its start date unless told otherwise"""
        event = {
            "id": generate_id("event"),
            "title": event_data["title"].strip(),
            "details": (event_data.get("details") or "").strip(),
            "type": event_data.get("type") or "event",
            "startDate": event_data.get("startDate"),
            "endDate": event_data.get("endDate") or event_data.get("startDate"),
            "createdBy": user.get("name"),
            "createdById": user.get("id"),
            "createdAt": utc_now_iso(),
        }
        events = self._read(keys.EXAM_EVENTS)
        events.append(event)
        self._write(keys.EXAM_EVENTS, events)
        self.audit.log("CREATE_EVENT", user, f"Created event: {event['title']}")
        return event

    def delete_exam_event(self, event_id: str, user: Record) -> bool:
        events = self._read(keys.EXAM_EVENTS)
        self._write(keys.EXAM_EVENTS, [e for e in events if e.get("id") != event_id])
        self.audit.log("DELETE_EVENT", user, f"Deleted event {event_id}")
        return True


__all__ = ["CalendarService"]
