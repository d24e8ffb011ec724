"""Tests for session_journal.services.work_renderer."""

from session_journal.services.work_renderer import render_work_performed
from session_journal.types.narrative import Activity, ActivityKind, Segment


def _act(description, kind=ActivityKind.FILE_MODIFY, is_error=False):
    return Activity(kind=kind, description=description, is_error=is_error)


class TestRenderWorkPerformed:
    def test_empty(self):
        assert render_work_performed([]) == ""
        assert render_work_performed([Segment(), Segment()]) == ""

    def test_single_segment_flat(self):
        seg = Segment(activities=[_act("Modified `a.py`"), _act("Ran tests (success)")])
        assert render_work_performed([seg]) == "- Modified `a.py`\n- Ran tests (success)\n"

    def test_single_non_empty_segment_has_no_headers(self):
        segs = [Segment(index=0), Segment(index=1, activities=[_act("x")], user_request="do x")]
        assert render_work_performed(segs) == "- x\n"

    def test_multiple_segments(self):
        segs = [
            Segment(activities=[_act("one")], user_request="first task"),
            Segment(activities=[_act("two")]),
        ]
        assert render_work_performed(segs) == (
            "### Segment 1\n"
            '> "first task"\n'
            "\n"
            "- one\n"
            "\n"
            "### Segment 2\n"
            "\n"
            "- two\n"
        )

    def test_long_session_caps_commands(self):
        acts = [_act(f"Ran cmd {i}", kind=ActivityKind.COMMAND) for i in range(45)]
        acts.append(_act("Ran broken (failed)", kind=ActivityKind.COMMAND, is_error=True))
        acts += [_act(f"Modified f{i}") for i in range(10)]
        out = render_work_performed([Segment(activities=acts)])
        lines = out.splitlines()

        assert sum(1 for line in lines if line.startswith("- Ran cmd")) == 5
        assert "- Ran broken (failed)" in lines
        assert sum(1 for line in lines if line.startswith("- Modified")) == 10
        assert lines[-1] == "- ... and 40 more commands"

    def test_short_session_keeps_all_commands(self):
        acts = [_act(f"Ran cmd {i}", kind=ActivityKind.COMMAND) for i in range(20)]
        out = render_work_performed([Segment(activities=acts)])
        assert out.count("- Ran cmd") == 20
        assert "more commands" not in out
