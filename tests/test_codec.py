"""
Unit Tests for the schema registry and record codec
"""
import pytest

from acadcentral.database.codec import decode, encode
from acadcentral.database.schema import COLLECTIONS, columns_for, get_spec, is_synced_collection
from acadcentral.exceptions import UnknownCollectionException
from acadcentral.store import keys


class TestSchemaRegistry:
    """Tests for collection specs"""

    def test_every_synced_key_has_a_spec(self):
        assert set(COLLECTIONS) == set(keys.SYNC_KEYS)

    def test_session_keys_are_not_synced(self):
        assert not is_synced_collection(keys.CURRENT_USER_KEY)
        assert not is_synced_collection(keys.MIGRATION_VERSION_KEY)
        assert not is_synced_collection(None)

    def test_unknown_collection_raises(self):
        with pytest.raises(UnknownCollectionException) as exc_info:
            get_spec('acportal_grades')

        assert exc_info.value.status_code == 400

    def test_columns_exclude_bookkeeping(self):
        columns = columns_for(keys.NOTICES)

        assert columns[0] == 'id'
        assert 'created_at' not in columns
        assert 'urgent' in columns

    def test_chat_fields_use_logical_names(self):
        spec = get_spec(keys.CHAT_MESSAGES)

        assert 'isRead' in spec.columns
        assert 'read' in spec.fields
        assert 'isRead' not in spec.fields

    def test_natural_keys_declared(self):
        assert get_spec(keys.ATTENDANCE).natural_key == ('date', 'courseId', 'studentId')
        assert get_spec(keys.RESULTS).natural_key == ('assessmentName', 'courseId', 'studentId')
        assert get_spec(keys.FILES).natural_key is None


class TestEncode:
    """Tests for record -> row"""

    def test_unknown_fields_dropped(self):
        row = encode(keys.NOTICES, {'id': 'n1', 'title': 'Exam', 'colour': 'red'})

        assert row == {'id': 'n1', 'title': 'Exam'}

    def test_json_fields_serialized(self):
        row = encode(keys.CLASSROOMS, {'id': 'c1', 'studentIds': ['s1', 's2'], 'notes': []})

        assert row['studentIds'] == '["s1", "s2"]'
        assert row['notes'] == '[]'

    def test_json_string_passed_through(self):
        row = encode(keys.CLASSROOMS, {'id': 'c1', 'studentIds': '["s1"]'})

        assert row['studentIds'] == '["s1"]'

    def test_boolean_becomes_integer(self):
        assert encode(keys.NOTICES, {'id': 'n1', 'urgent': True})['urgent'] == 1
        assert encode(keys.NOTICES, {'id': 'n1', 'urgent': False})['urgent'] == 0

    def test_read_aliased_to_is_read(self):
        row = encode(keys.CHAT_MESSAGES, {'id': 'm1', 'read': True})

        assert row == {'id': 'm1', 'isRead': 1}

    def test_timestamp_becomes_naive_utc(self):
        row = encode(keys.NOTICES, {'id': 'n1', 'postedDate': '2024-03-01T10:15:30.250Z'})

        posted = row['postedDate']
        assert posted.tzinfo is None
        assert (posted.year, posted.hour, posted.microsecond) == (2024, 10, 250000)

    def test_offset_timestamp_normalized_to_utc(self):
        row = encode(keys.NOTICES, {'id': 'n1', 'postedDate': '2024-03-01T15:45:00+05:30'})

        assert row['postedDate'].hour == 10
        assert row['postedDate'].minute == 15

    def test_unparsable_timestamp_stored_as_null(self):
        row = encode(keys.NOTICES, {'id': 'n1', 'postedDate': 'yesterday'})

        assert row['postedDate'] is None

    def test_date_columns(self):
        row = encode(keys.EXAM_EVENTS, {'id': 'e1', 'startDate': '2024-05-10', 'endDate': '2024-05-12T00:00:00Z'})

        assert row['startDate'].isoformat() == '2024-05-10'
        assert row['endDate'].isoformat() == '2024-05-12'


class TestDecode:
    """Tests for row -> record"""

    def test_created_at_never_leaks(self):
        record = decode(keys.AUDIT_LOGS, {'id': 'l1', 'action': 'LOGIN', 'created_at': object()})

        assert record == {'id': 'l1', 'action': 'LOGIN'}

    def test_invalid_json_kept_raw(self):
        record = decode(keys.QUIZ_ROOMS, {'id': 'q1', 'questions': '[{"text": '})

        assert record['questions'] == '[{"text": '

    def test_is_read_back_to_boolean(self):
        record = decode(keys.CHAT_MESSAGES, {'id': 'm1', 'isRead': 0})

        assert record == {'id': 'm1', 'read': False}


class TestRoundTrip:
    """decode(encode(r)) == r for schema-declared fields"""

    def test_chat_message(self):
        message = {
            'id': 'm1',
            'key': 'a_b',
            'senderId': 'a',
            'receiverId': 'b',
            'text': 'hello',
            'timestamp': '2024-03-01T10:15:30.250Z',
            'read': False,
        }

        assert decode(keys.CHAT_MESSAGES, encode(keys.CHAT_MESSAGES, message)) == message

    def test_quiz_room_with_questions(self):
        room = {
            'id': 'q1',
            'code': 'ABC234',
            'questions': [{'text': '2+2', 'options': ['3', '4'], 'correctIndex': 1}],
            'status': 'open',
            'createdAt': '2024-03-01T10:15:30.000Z',
        }

        assert decode(keys.QUIZ_ROOMS, encode(keys.QUIZ_ROOMS, room)) == room

    def test_extra_fields_narrowed(self):
        notice = {'id': 'n1', 'title': 'Exam', 'urgent': True, 'pinnedBy': 'hod'}

        decoded = decode(keys.NOTICES, encode(keys.NOTICES, notice))

        assert decoded == {'id': 'n1', 'title': 'Exam', 'urgent': True}
        assert decoded != notice
