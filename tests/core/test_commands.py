"""评论命令解析测试"""

import pytest
from taskboard.core.commands import extract_command


class TestExtractCommand:
    """extract_command() 测试"""

    def test_marker_at_start(self):
        assert extract_command("@TARS summarize this thread") == "summarize this thread"

    def test_marker_case_insensitive_with_separator(self):
        assert extract_command("hey @tars: draft a reply") == "draft a reply"

    def test_command_spans_lines(self):
        body = "context first\n@TARS draft\nrelease notes"
        assert extract_command(body) == "draft\nrelease notes"

    @pytest.mark.parametrize(
        "body",
        [
            "",
            "no marker here",
            "@TARS",
            "@TARS   ",
            "@TARS: ",
            "mail me@TARS.example",
            "@TARSBOT do it",
            "@@TARS do it",
        ],
    )
    def test_no_command(self, body):
        assert extract_command(body) is None
