"""
Unit Tests for direct messages
"""
from acadcentral.services.chat import conversation_key
from acadcentral.store import keys

from conftest import make_user


def seed(portal, *users):
    portal.store.write_collection(keys.USERS, list(users))


class TestMessages:
    """Tests for sending and reading messages"""

    def test_conversation_key_is_symmetric(self):
        assert conversation_key('b', 'a') == conversation_key('a', 'b') == 'a_b'

    def test_send_and_read_thread(self, portal, student, faculty):
        first = portal.chat.send_message(faculty['id'], '  Is the lab open?  ', student)
        reply = portal.chat.send_message(student['id'], 'Yes', faculty)

        assert first['text'] == 'Is the lab open?'
        assert first['read'] is False
        assert portal.chat.get_messages(faculty['id'], student['id']) == [first, reply]
        assert portal.audit.get_logs() == []

    def test_thread_ordered_by_time(self, portal):
        portal.store.write_collection(keys.CHAT_MESSAGES, [
            {'id': 'm2', 'key': 'a_b', 'timestamp': '2024-01-01T10:05:00.000Z'},
            {'id': 'm1', 'key': 'a_b', 'timestamp': '2024-01-01T10:00:00.000Z'},
            {'id': 'm3', 'key': 'a_c', 'timestamp': '2024-01-01T09:00:00.000Z'},
        ])

        assert [m['id'] for m in portal.chat.get_messages('b', 'a')] == ['m1', 'm2']

    def test_unread_and_mark_read(self, portal, student, faculty):
        portal.chat.send_message(faculty['id'], 'One', student)
        portal.chat.send_message(faculty['id'], 'Two', student)
        portal.chat.send_message(student['id'], 'Reply', faculty)

        assert portal.chat.get_unread_count(faculty['id'], student['id']) == 2

        portal.chat.mark_messages_read(faculty['id'], student['id'])

        assert portal.chat.get_unread_count(faculty['id'], student['id']) == 0
        assert portal.chat.get_unread_count(student['id'], faculty['id']) == 1


class TestContacts:
    """Tests for the contact list and unread totals"""

    def test_students_see_staff_only(self, portal, student, faculty, admin):
        classmate = make_user('student')
        seed(portal, student, classmate, faculty, admin)

        contacts = portal.chat.get_chat_contacts(student)

        assert {c['id'] for c in contacts} == {faculty['id'], admin['id']}

    def test_staff_see_everyone_else(self, portal, student, faculty, admin):
        seed(portal, student, faculty, admin)

        contacts = portal.chat.get_chat_contacts(faculty)

        assert {c['id'] for c in contacts} == {student['id'], admin['id']}

    def test_most_recent_conversation_first(self, portal, student, faculty, admin):
        seed(portal, student, faculty, admin)
        portal.store.write_collection(keys.CHAT_MESSAGES, [
            {'id': 'm1', 'key': conversation_key(student['id'], admin['id']), 'timestamp': '2024-01-01T10:00:00.000Z'},
        ])

        contacts = portal.chat.get_chat_contacts(student)

        assert [c['id'] for c in contacts] == [admin['id'], faculty['id']]
        assert contacts[0]['lastMsgTs'] == 1704103200000
        assert contacts[1]['lastMsgTs'] == 0

    def test_total_unread_counts_valid_contacts(self, portal, student, faculty):
        classmate = make_user('student')
        seed(portal, student, classmate, faculty)
        portal.users.login(student['email'], 'secret123', 'student')

        portal.chat.send_message(student['id'], 'From faculty', faculty)
        portal.chat.send_message(student['id'], 'From classmate', classmate)

        assert portal.chat.get_total_unread(student['id']) == 1

    def test_total_unread_signed_out(self, portal, student, faculty):
        seed(portal, student, faculty)
        portal.chat.send_message(student['id'], 'Hi', faculty)

        assert portal.chat.get_total_unread(student['id']) == 0
