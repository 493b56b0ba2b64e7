"""
AcadCentral Department Portal
Direct messages between portal users
"""

from typing import List

from ..store import keys
from ..utils.helpers import generate_id, timestamp_sort_key, utc_now_iso
from .base import BaseService, Record
from .users import STAFF_ROLES


def conversation_key(user_id: str, other_id: str) -> str:
    """Order-independent conversation id for a pair of users"""
    return "_".join(sorted([user_id, other_id]))


class ChatService(BaseService):

    def get_messages(self, user_id: str, other_id: str) -> List[Record]:
        key = conversation_key(user_id, other_id)
        messages = [m for m in self._read(keys.CHAT_MESSAGES) if m.get("key") == key]
        return sorted(messages, key=lambda m: timestamp_sort_key(m.get("timestamp")))

    def send_message(self, to_user_id: str, text: str, sender: Record) -> Record:
        message = {
            "id": generate_id("msg"),
            "key": conversation_key(sender.get("id"), to_user_id),
            "senderId": sender.get("id"),
            "senderName": sender.get("name"),
            "senderRole": sender.get("role"),
            "receiverId": to_user_id,
            "text": text.strip(),
            "timestamp": utc_now_iso(),
            "read": False,
        }
        messages = self._read(keys.CHAT_MESSAGES)
        messages.append(message)
        self._write(keys.CHAT_MESSAGES, messages)
        return message

    def get_chat_contacts(self, user: Record) -> List[Record]:
        """
        Users this user may message, most recent conversation first, each
        annotated with ``lastMsgTs`` (epoch milliseconds, 0 when none).
        Students may only message staff.
        """
        users = self._read(keys.USERS)
        if user.get("role") == "student":
            contacts = [u for u in users if u.get("role") in STAFF_ROLES and u.get("id") != user.get("id")]
        else:
            contacts = [u for u in users if u.get("id") != user.get("id")]

        messages = self._read(keys.CHAT_MESSAGES)
        for contact in contacts:
            key = conversation_key(user.get("id"), contact.get("id"))
            thread = [m for m in messages if m.get("key") == key]
            contact["lastMsgTs"] = (
                int(timestamp_sort_key(thread[-1].get("timestamp")).timestamp() * 1000) if thread else 0
            )

        return sorted(contacts, key=lambda c: c["lastMsgTs"], reverse=True)

    def get_unread_count(self, user_id: str, from_user_id: str) -> int:
        return sum(
            1 for m in self._read(keys.CHAT_MESSAGES)
            if m.get("receiverId") == user_id and m.get("senderId") == from_user_id and not m.get("read")
        )

    def mark_messages_read(self, user_id: str, from_user_id: str) -> None:
        messages = self._read(keys.CHAT_MESSAGES)
        for message in messages:
            if message.get("receiverId") == user_id and message.get("senderId") == from_user_id:
                message["read"] = True
        self._write(keys.CHAT_MESSAGES, messages)

    def get_total_unread(self, user_id: str) -> int:
        """Unread messages for the signed-in user, counting only senders who are still valid contacts"""
        current = self.store.read_json(keys.CURRENT_USER_KEY)
        if not isinstance(current, dict):
            return 0

        contact_ids = {c.get("id") for c in self.get_chat_contacts(current)}
        return sum(
            1 for m in self._read(keys.CHAT_MESSAGES)
            if m.get("receiverId") == user_id and m.get("senderId") in contact_ids and not m.get("read")
        )


__all__ = ["ChatService", "conversation_key"]
