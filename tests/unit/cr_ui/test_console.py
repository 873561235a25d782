import io

import pytest

from cr_ui.adapters.console import ConsoleUIAdapter

pytestmark = pytest.mark.unit_ui


@pytest.fixture
def stream() -> io.StringIO:
    return io.StringIO()


def test_topics_and_messages(stream):
    ui = ConsoleUIAdapter(stream)
    ui.show_topic("Building base image")
    ui.show_warning("Run 2 failed")
    output = stream.getvalue()
    assert "===> Building base image" in output
    assert "     Run 2 failed" in output


def test_results_table_renders_every_cell(stream):
    ui = ConsoleUIAdapter(stream)
    ui.show_table(
        "Results",
        ["RUN", "SUCCESS", "DURATION", "MESSAGE"],
        [["1", "false", "1m5s", "Run failed"], ["rspec", "true", "12s", ""]],
    )
    output = stream.getvalue()
    for cell in ("RUN", "MESSAGE", "Run failed", "rspec", "1m5s", "12s"):
        assert cell in output


def test_markup_in_output_is_not_interpreted(stream):
    ui = ConsoleUIAdapter(stream)
    ui.show_output("1", "expected [bold]x[/bold]", "")
    output = stream.getvalue()
    assert "[bold]x[/bold]" in output
    assert "Run 1 stdout" in output
    assert "(empty)" in output
