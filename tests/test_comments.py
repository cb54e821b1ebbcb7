from moltbook_tui.comments import (
    scroll_for_selection,
    selected_comment_id,
    tree_rows,
    visible_comment_ids,
    wrap_text,
)

from tests.factories import make_comment


def sample_tree():
    # a
    # ├─ b
    # │  └─ d
    # └─ c
    # e
    return [
        make_comment("a", make_comment("b", make_comment("d")), make_comment("c")),
        make_comment("e"),
    ]


class TestVisibleComments:
    def test_depth_first_order(self):
        assert visible_comment_ids(sample_tree(), set()) == ["a", "b", "d", "c", "e"]

    def test_collapsed_comment_hides_descendants(self):
        assert visible_comment_ids(sample_tree(), {"b"}) == ["a", "b", "c", "e"]
        assert visible_comment_ids(sample_tree(), {"a"}) == ["a", "e"]

    def test_selected_comment_id_follows_visible_order(self):
        assert selected_comment_id(sample_tree(), {"a"}, 1) == "e"
        assert selected_comment_id(sample_tree(), set(), 10) is None


class TestTreeRows:
    def test_guides_and_branches(self):
        rows = {row.comment.id: row for row in tree_rows(sample_tree(), set())}
        assert rows["a"].prefix == ""
        assert rows["b"].prefix == "│ ├─"
        assert rows["d"].prefix == "│ │ └─"
        assert rows["c"].prefix == "│ └─"
        assert rows["e"].prefix == ""

    def test_content_prefix_continues_sibling_line(self):
        rows = {row.comment.id: row for row in tree_rows(sample_tree(), set())}
        assert rows["a"].content_prefix == ""
        assert rows["b"].content_prefix == "│ │ "
        assert rows["c"].content_prefix == "│   "

    def test_collapsed_row_summarises_hidden_comments(self):
        rows = tree_rows(sample_tree(), {"b"}, selected_id="b")
        collapsed = next(row for row in rows if row.comment.id == "b")
        assert collapsed.selected
        assert collapsed.collapsed
        assert collapsed.summary == "[+2 comments hidden]"
        assert "d" not in [row.comment.id for row in rows]

    def test_collapsing_a_leaf_has_no_summary(self):
        rows = tree_rows(sample_tree(), {"e"})
        leaf = next(row for row in rows if row.comment.id == "e")
        assert not leaf.collapsed
        assert leaf.summary is None


class TestLayoutHelpers:
    def test_wrap_text(self):
        assert wrap_text("hello world", 5) == ["hello", "world"]
        assert wrap_text("", 10) == [""]
        assert wrap_text("one\n\ntwo", 10) == ["one", "", "two"]

    def test_scroll_moves_down_past_bottom(self):
        assert scroll_for_selection(30, 0, 20) == 20

    def test_scroll_moves_up_past_top(self):
        assert scroll_for_selection(2, 10, 20) == 0

    def test_scroll_unchanged_when_visible(self):
        assert scroll_for_selection(5, 0, 20) == 0
