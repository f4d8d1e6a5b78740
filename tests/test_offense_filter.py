import unittest

from cwtools_check.domain import AnnotationLevel, Conclusion, Offense, Position
from pipeline.report import VerdictTracker, filter_offenses, normalize_path


def _offense(file: str, severity: str = "Error", category: str = "CW100") -> Offense:
    return Offense(
        file=file,
        severity=severity,
        category=category,
        message="msg",
        position=Position(start_line=1, end_line=1, start_column=1, end_column=2),
    )


class TestNormalizePath(unittest.TestCase):
    def test_strips_workspace_prefix_and_whitespace(self) -> None:
        self.assertEqual("common/a.txt", normalize_path("/ws/common/a.txt", "/ws"))
        self.assertEqual("common/a.txt", normalize_path("/ws/common/a.txt ", "/ws/"))
        self.assertEqual("a.txt", normalize_path("  /ws/a.txt\n", "/ws"))

    def test_paths_outside_workspace_are_kept(self) -> None:
        self.assertEqual("/other/a.txt", normalize_path("/other/a.txt", "/ws"))
        # Prefix must match a whole directory component.
        self.assertEqual("/wsx/a.txt", normalize_path("/wsx/a.txt", "/ws"))
        self.assertEqual("a.txt", normalize_path("a.txt", None))


class TestFilterOffenses(unittest.TestCase):
    def test_order_is_preserved(self) -> None:
        offenses = [_offense("/ws/c.txt"), _offense("/ws/a.txt"), _offense("/ws/b.txt")]
        out = filter_offenses(
            offenses,
            workspace="/ws",
            suppressed_files=frozenset(),
            suppressed_categories={},
        )
        self.assertEqual(offenses, out)

    def test_suppressed_files_are_matched_after_normalization(self) -> None:
        offenses = [_offense("/ws/a.txt"), _offense("/ws/b.txt")]
        out = filter_offenses(
            offenses,
            workspace="/ws",
            suppressed_files=frozenset({"a.txt"}),
            suppressed_categories={},
        )
        self.assertEqual(["/ws/b.txt"], [o.file for o in out])

    def test_changed_only_restricts_to_changed_files(self) -> None:
        offenses = [_offense("/ws/a.txt"), _offense("/ws/b.txt")]
        out = filter_offenses(
            offenses,
            workspace="/ws",
            suppressed_files=frozenset(),
            suppressed_categories={},
            changed_only=True,
            changed_files=frozenset({"b.txt"}),
        )
        self.assertEqual(["/ws/b.txt"], [o.file for o in out])

    def test_changed_only_with_empty_change_set_drops_everything(self) -> None:
        tracker = VerdictTracker()
        out = filter_offenses(
            [_offense("/ws/a.txt")],
            workspace="/ws",
            suppressed_files=frozenset(),
            suppressed_categories={},
            changed_only=True,
            changed_files=frozenset(),
            tracker=tracker,
        )
        self.assertEqual([], out)
        self.assertEqual(0, tracker.counts.total)

    def test_changed_files_ignored_when_not_changed_only(self) -> None:
        out = filter_offenses(
            [_offense("/ws/a.txt")],
            workspace="/ws",
            suppressed_files=frozenset(),
            suppressed_categories={},
            changed_only=False,
            changed_files=frozenset({"other.txt"}),
        )
        self.assertEqual(1, len(out))

    def test_category_suppression_is_keyed_by_level(self) -> None:
        offenses = [
            _offense("/ws/a.txt", severity="Error", category="CW100"),
            _offense("/ws/a.txt", severity="Warning", category="CW100"),
            _offense("/ws/a.txt", severity="Hint", category="CW100"),
        ]
        tracker = VerdictTracker()
        out = filter_offenses(
            offenses,
            workspace="/ws",
            suppressed_files=frozenset(),
            suppressed_categories={AnnotationLevel.WARNING: frozenset({"CW100"})},
            tracker=tracker,
        )
        self.assertEqual(["Error", "Hint"], [o.severity for o in out])
        self.assertEqual({"failure": 1, "warning": 0, "notice": 1}, tracker.counts.as_dict())
        self.assertIs(Conclusion.FAILURE, tracker.conclusion)

    def test_unknown_severity_is_suppressed_under_notice(self) -> None:
        out = filter_offenses(
            [_offense("/ws/a.txt", severity="Bogus", category="CW9")],
            workspace="/ws",
            suppressed_files=frozenset(),
            suppressed_categories={AnnotationLevel.NOTICE: frozenset({"CW9"})},
        )
        self.assertEqual([], out)


if __name__ == "__main__":
    unittest.main()
