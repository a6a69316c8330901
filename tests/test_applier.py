"""Tests for sequential block application."""

from concurrent.futures import ThreadPoolExecutor

from editcore import apply, parse, validate
from editcore.applier import PatchApplier, apply_edit_blocks, splice
from editcore.types import EditBlock, MatchStrategy


def eb(search: str, replace: str, index: int = 0) -> EditBlock:
    return EditBlock(search_text=search, replace_text=replace, index=index)


class TestApplyBasics:
    """Single-block behaviour."""

    def test_exact_round_trip(self):
        content = "a\nb\nc\n"
        result = apply_edit_blocks(content, [eb("b", "B")])

        assert result.all_successful
        assert result.after_content == "a\nB\nc\n"
        assert result.per_block[0].strategy is MatchStrategy.EXACT

    def test_whitespace_drift_preserves_surroundings(self):
        content = "def f():\n    x  =  1\n    return x\n"
        result = apply_edit_blocks(content, [eb("x = 1", "x = 2")])

        assert result.all_successful
        assert result.per_block[0].strategy is MatchStrategy.WHITESPACE_NORMALIZED
        assert result.after_content == "def f():\n    x = 2\n    return x\n"

    def test_deletion(self):
        content = "keep\ndrop\nkeep too\n"
        result = apply_edit_blocks(content, [eb("drop\n", "")])

        assert result.after_content == "keep\nkeep too\n"

    def test_empty_block_list(self):
        result = apply_edit_blocks("unchanged", [])

        assert result.all_successful
        assert result.after_content == "unchanged"
        assert result.get_summary() == "0/0 blocks applied"
        assert result.get_failure_feedback() == ""

    def test_splice(self):
        assert splice("hello world", 6, 11, "there") == "hello there"


class TestSequentialBlocks:
    """Each block sees the buffer produced by the ones before it."""

    def test_dependent_edits_in_order(self):
        first = eb("start()", "start()\nfinish()", 0)
        second = eb("finish()", "done()", 1)
        result = apply_edit_blocks("start()\n", [first, second])

        assert result.all_successful
        assert result.after_content == "start()\ndone()\n"

    def test_dependent_edits_reversed(self):
        first = eb("start()", "start()\nfinish()", 0)
        second = eb("finish()", "done()", 1)
        result = apply_edit_blocks("start()\n", [second, first])

        assert not result.all_successful
        assert not result.per_block[0].success
        assert result.per_block[1].success
        assert result.after_content == "start()\nfinish()\n"

    def test_locations_refer_to_current_buffer(self):
        result = apply_edit_blocks("a\nb\n", [eb("a", "x\ny\na"), eb("b", "B")])

        assert result.per_block[1].location.start_line == 4
        assert result.after_content == "x\ny\na\nB\n"


class TestPartialFailure:
    """Failed blocks are reported without blocking the others."""

    def test_second_block_fails(self):
        blocks = [eb("one", "ONE", 0), eb("missing_function_call()", "x", 1)]
        result = apply_edit_blocks("one\ntwo\n", blocks)

        assert not result.all_successful
        assert result.per_block[0].success
        assert not result.per_block[1].success
        assert result.failed_blocks() == [2]
        assert result.get_summary() == "1/2 blocks applied"

        feedback = result.get_failure_feedback()
        assert feedback.startswith("Block 2 failed:")
        assert "Block 1" not in feedback
        assert "missing_function_call()" in feedback

    def test_failed_block_leaves_buffer_and_later_blocks_run(self):
        blocks = [eb("missing_function_call()", "x", 0), eb("one", "ONE", 1)]
        result = apply_edit_blocks("one\ntwo\n", blocks)

        assert not result.per_block[0].success
        assert result.per_block[1].success
        assert result.after_content == "ONE\ntwo\n"

    def test_ambiguous_block_not_applied(self):
        result = apply_edit_blocks("foo\nfoo\n", [eb("foo", "bar")])

        assert not result.all_successful
        assert result.after_content == "foo\nfoo\n"


class TestEngineApi:
    """parse -> validate -> apply through the package API."""

    def test_full_pipeline(self):
        payload = (
            "<<<<<<< SEARCH\n"
            "def greet():\n"
            "    print('hi')\n"
            "=======\n"
            "def greet():\n"
            "    print('hello')\n"
            ">>>>>>> REPLACE\n"
        )
        content = "import os\n\ndef greet():\n    print('hi')\n"

        blocks = parse(payload)
        assert validate(blocks) == []

        result = apply(content, blocks)
        assert result.all_successful
        assert result.after_content == "import os\n\ndef greet():\n    print('hello')\n"

    def test_concurrent_callers(self):
        applier = PatchApplier()
        contents = [f"value = {i}\n" for i in range(20)]

        def run(i):
            return applier.apply(contents[i], [eb(f"value = {i}", f"value = {i * 10}")])

        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(run, range(20)))

        assert [r.after_content for r in results] == [f"value = {i * 10}\n" for i in range(20)]
        assert contents[3] == "value = 3\n"
