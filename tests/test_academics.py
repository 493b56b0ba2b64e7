"""
Unit Tests for attendance, timetable and results
"""
import pytest

from acadcentral.services.results import compute_grade


class TestAttendance:
    """Tests for daily attendance"""

    def test_same_day_remark_overwrites(self, portal, faculty):
        mark = {'date': '2024-03-01', 'courseId': 'BCA-A', 'studentId': 's1'}

        portal.attendance.save_attendance([{**mark, 'status': 'present'}], faculty)
        stored = portal.attendance.save_attendance([{**mark, 'status': 'absent'}], faculty)

        assert len(stored) == 1
        assert stored[0]['status'] == 'absent'
        assert stored[0]['takenBy'] == faculty['id']

    def test_other_day_is_new_record(self, portal, faculty):
        portal.attendance.save_attendance(
            [{'date': '2024-03-01', 'courseId': 'BCA-A', 'studentId': 's1', 'status': 'present'}], faculty
        )
        portal.attendance.save_attendance([
            {'date': '2024-03-02', 'courseId': 'BCA-A', 'studentId': 's1', 'status': 'absent'},
            {'date': '2024-03-02', 'courseId': 'BCA-A', 'studentId': 's2', 'status': 'present'},
        ], faculty)

        assert len(portal.attendance.get_attendance()) == 3
        assert len(portal.attendance.get_attendance(date='2024-03-02')) == 2
        assert [r['date'] for r in portal.attendance.get_attendance(student_id='s1')] == ['2024-03-01', '2024-03-02']
        assert portal.attendance.get_attendance(course_id='BBA-B') == []
        assert portal.audit.get_logs()[0]['detail'] == 'Recorded attendance for 2 students'


class TestTimetable:
    """Tests for the weekly timetable"""

    PERIODS = [
        {'dayOfWeek': 'Mon', 'startTime': '09:00', 'endTime': '10:00', 'sub': 'DBMS', 'teacherId': 't1'},
        {'dayOfWeek': 'Tue', 'startTime': '10:00', 'endTime': '11:00', 'sub': 'Java', 'teacherId': 't2'},
    ]

    def test_save_replaces_course_group(self, portal, admin):
        portal.timetable.save_timetable('BCA-A', self.PERIODS, admin)
        portal.timetable.save_timetable('BCA-B', self.PERIODS[:1], admin)

        assert portal.timetable.save_timetable('BCA-A', self.PERIODS[1:], admin) is True

        slots = portal.timetable.get_timetable(course_id='BCA-A')
        assert [s['sub'] for s in slots] == ['Java']
        assert slots[0]['createdBy'] == admin['id']
        assert len(portal.timetable.get_timetable(course_id='BCA-B')) == 1

    def test_filter_by_teacher(self, portal, admin):
        portal.timetable.save_timetable('BCA-A', self.PERIODS, admin)

        assert [s['sub'] for s in portal.timetable.get_timetable(teacher_id='t1')] == ['DBMS']


class TestResults:
    """Tests for results and grading"""

    @pytest.mark.parametrize('theory, viva, expected', [
        (30, 15, (45.0, 'O')),
        (27, 13.5, (40.5, 'O')),
        (26, 10, (36.0, 'A+')),
        (22, 10, (32.0, 'A')),
        (20, 7, (27.0, 'B+')),
        (15, 8, (23.0, 'B')),
        (10, 5, (15.0, 'F')),
        ('', None, (0.0, 'F')),
        ('25', '12', (37.0, 'A+')),
    ])
    def test_compute_grade(self, theory, viva, expected):
        assert compute_grade(theory, viva) == expected

    def test_save_single_and_update(self, portal, faculty):
        result = {'assessmentName': 'IA-1', 'courseId': 'BCA-A', 'studentId': 's1', 'theory': 20, 'viva': 10}

        portal.results.save_results(result, faculty)
        stored = portal.results.save_results({**result, 'viva': 12, 'grade': 'A'}, faculty)

        assert len(stored) == 1
        assert stored[0]['viva'] == 12
        assert stored[0]['theory'] == 20
        assert stored[0]['id'].startswith('res-')

    def test_save_batch_and_filter(self, portal, faculty):
        portal.results.save_results([
            {'assessmentName': 'IA-1', 'courseId': 'BCA-A', 'studentId': 's1'},
            {'assessmentName': 'IA-1', 'courseId': 'BCA-A', 'studentId': 's2'},
            {'assessmentName': 'IA-2', 'courseId': 'BCA-A', 'studentId': 's1'},
        ], faculty)

        assert len(portal.results.get_results(course_id='BCA-A')) == 3
        assert len(portal.results.get_results(student_id='s1')) == 2
        assert portal.audit.get_logs()[0]['detail'] == 'Saved 3 result(s)'

    def test_update_keeps_stored_id(self, portal, faculty):
        result = {'assessmentName': 'IA-1', 'courseId': 'BCA-A', 'studentId': 's1', 'theory': 20}
        original = portal.results.save_results(result, faculty)[0]

        stored = portal.results.save_results({**result, 'id': 'other', 'theory': 25}, faculty)

        assert [r['id'] for r in stored] == [original['id']]
        assert stored[0]['theory'] == 25
