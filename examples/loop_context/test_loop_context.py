"""Tests for the loop_context example."""


class TestLoopContextApp:
    """Verify loop.first, loop.last, loop.index, loop.length work correctly."""

    def test_one_button_per_workspace(self, example_app) -> None:
        assert example_app.output.count("<button") == 4

    def test_first_button_has_first_class(self, example_app) -> None:
        first = example_app.output.split("</button>")[0]
        assert "first" in first
        assert "last" not in first

    def test_last_button_has_last_class(self, example_app) -> None:
        last = example_app.output.split("</button>")[3]
        assert "last" in last

    def test_index_target_is_zero_based(self, example_app) -> None:
        assert 'data-index="0"' in example_app.output
        assert 'data-index="3"' in example_app.output

    def test_loop_index_and_length_rendered(self, example_app) -> None:
        assert "1/4 web" in example_app.output
        assert "4/4 music" in example_app.output

    def test_focused_workspace(self, example_app) -> None:
        assert example_app.output.count("focused") == 1
        assert "focused" in example_app.output.split("</button>")[1]
