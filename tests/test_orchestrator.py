import json
import tempfile
import unittest
from pathlib import Path
from typing import Any, Dict, List, Optional
from unittest.mock import patch

from cwtools_check.domain import Conclusion
from cwtools_check.errors import AnalyzerError, ChangeSetError, ConfigurationError, PublishError
from pipeline.config import RunConfig
from pipeline.orchestrator import run, run_github, run_gitlab


class FakePublisher:
    def __init__(self, *, fail_on: Optional[str] = None) -> None:
        self.calls: List[Any] = []
        self.fail_on = fail_on

    def _maybe_fail(self, what: str) -> None:
        if self.fail_on == what:
            raise PublishError(f"{what} failed", status_code=500)

    def create(self) -> int:
        self.calls.append(("create",))
        self._maybe_fail("create")
        return 1

    def update(self, output: Dict[str, Any]) -> None:
        self.calls.append(("update", output))
        self._maybe_fail("update")

    def complete(self, conclusion: str) -> None:
        self.calls.append(("complete", conclusion))
        self._maybe_fail("complete")


def _doc(n: int, severity: str = "Warning", workspace: str = "/ws") -> Dict[str, Any]:
    return {
        "files": [
            {
                "file": f"{workspace}/f{i}.txt",
                "errors": [
                    {
                        "severity": severity,
                        "category": "CW1",
                        "message": "m",
                        "position": {"startLine": 1, "endLine": 1, "startColumn": 1, "endColumn": 2},
                    }
                ],
            }
            for i in range(n)
        ]
    }


class OrchestratorCase(unittest.TestCase):
    def setUp(self) -> None:
        self._td = tempfile.TemporaryDirectory()
        self.root = Path(self._td.name)
        self.event_path = self.root / "event.json"
        self.event_path.write_text(
            json.dumps({"repository": {"name": "mod", "owner": {"login": "me"}}, "before": "0ld"}),
            encoding="utf-8",
        )

    def tearDown(self) -> None:
        self._td.cleanup()

    def config(self, **overrides: Any) -> RunConfig:
        values: Dict[str, Any] = dict(
            ci_env="github",
            workspace="/ws",
            token="t",
            event_path=str(self.event_path),
            sha="abc",
            game="stellaris",
        )
        values.update(overrides)
        return RunConfig(**values)


class TestRunGitHub(OrchestratorCase):
    def test_pages_then_conclusion(self) -> None:
        publisher = FakePublisher()
        report = run_github(
            self.config(),
            analyzer=lambda cfg: _doc(120),
            publisher_factory=lambda cfg, ev: publisher,
        )
        kinds = [c[0] for c in publisher.calls]
        self.assertEqual(["create", "update", "update", "update", "complete"], kinds)
        self.assertEqual(("complete", "neutral"), publisher.calls[-1])
        self.assertIs(Conclusion.NEUTRAL, report.conclusion)
        self.assertEqual(50, len(publisher.calls[1][1]["annotations"]))

    def test_no_findings_sends_only_conclusion(self) -> None:
        publisher = FakePublisher()
        run_github(
            self.config(),
            analyzer=lambda cfg: {"files": []},
            publisher_factory=lambda cfg, ev: publisher,
        )
        self.assertEqual([("create",), ("complete", "success")], publisher.calls)

    def test_changed_only_uses_change_set(self) -> None:
        publisher = FakePublisher()
        seen = {}

        def change_set(cfg, event):
            seen["before"] = event.before
            return frozenset({"f1.txt"})

        report = run_github(
            self.config(changed_only=True),
            analyzer=lambda cfg: _doc(3, severity="Error"),
            change_set=change_set,
            publisher_factory=lambda cfg, ev: publisher,
        )
        self.assertEqual("0ld", seen["before"])
        self.assertEqual(["f1.txt"], [a.path for a in report.annotations])

    def test_new_branch_push_with_changed_only_reports_nothing(self) -> None:
        self.event_path.write_text(
            json.dumps({"repository": {"name": "mod", "owner": {"login": "me"}}, "before": "0" * 40}),
            encoding="utf-8",
        )
        publisher = FakePublisher()
        with patch("tools.core_git.run_cmd") as git:
            with self.assertLogs("tools.core_git", level="WARNING"):
                report = run_github(
                    self.config(changed_only=True),
                    analyzer=lambda cfg: _doc(2, severity="Error"),
                    publisher_factory=lambda cfg, ev: publisher,
                )
        git.assert_not_called()
        self.assertEqual((), report.annotations)
        self.assertEqual([("create",), ("complete", "success")], publisher.calls)

    def test_change_set_not_consulted_for_all_files(self) -> None:
        def change_set(cfg, event):
            raise AssertionError("should not be called")

        run_github(
            self.config(),
            analyzer=lambda cfg: _doc(1),
            change_set=change_set,
            publisher_factory=lambda cfg, ev: FakePublisher(),
        )

    def test_analyzer_failure_reports_failure_and_reraises(self) -> None:
        publisher = FakePublisher()

        def analyzer(cfg):
            raise AnalyzerError("no output.json")

        with self.assertLogs("pipeline.orchestrator", level="ERROR"):
            with self.assertRaises(AnalyzerError):
                run_github(self.config(), analyzer=analyzer, publisher_factory=lambda cfg, ev: publisher)
        self.assertEqual([("create",), ("complete", "failure")], publisher.calls)

    def test_change_set_failure_reports_failure(self) -> None:
        publisher = FakePublisher()

        def change_set(cfg, event):
            raise ChangeSetError("git diff failed")

        with self.assertLogs("pipeline.orchestrator", level="ERROR"):
            with self.assertRaises(ChangeSetError):
                run_github(
                    self.config(changed_only=True),
                    analyzer=lambda cfg: _doc(1),
                    change_set=change_set,
                    publisher_factory=lambda cfg, ev: publisher,
                )
        self.assertEqual(("complete", "failure"), publisher.calls[-1])

    def test_update_failure_keeps_original_error(self) -> None:
        publisher = FakePublisher(fail_on="update")
        with self.assertLogs("pipeline.orchestrator", level="ERROR"):
            with self.assertRaises(PublishError) as ctx:
                run_github(self.config(), analyzer=lambda cfg: _doc(1), publisher_factory=lambda cfg, ev: publisher)
        self.assertEqual("update failed", str(ctx.exception))
        self.assertEqual(("complete", "failure"), publisher.calls[-1])

    def test_failure_report_that_fails_does_not_mask_error(self) -> None:
        publisher = FakePublisher(fail_on="complete")

        def analyzer(cfg):
            raise AnalyzerError("boom")

        with self.assertLogs("pipeline.orchestrator", level="ERROR") as logs:
            with self.assertRaises(AnalyzerError):
                run_github(self.config(), analyzer=analyzer, publisher_factory=lambda cfg, ev: publisher)
        self.assertTrue(any("Could not report" in line for line in logs.output))

    def test_create_failure_propagates_without_further_calls(self) -> None:
        publisher = FakePublisher(fail_on="create")
        calls = []
        with self.assertRaises(PublishError):
            run_github(
                self.config(),
                analyzer=lambda cfg: calls.append("analyzer"),
                publisher_factory=lambda cfg, ev: publisher,
            )
        self.assertEqual([], calls)
        self.assertEqual([("create",)], publisher.calls)

    def test_missing_token_fails_before_any_call(self) -> None:
        factory_calls = []
        with self.assertRaises(ConfigurationError):
            run_github(
                self.config(token=None),
                analyzer=lambda cfg: _doc(1),
                publisher_factory=lambda cfg, ev: factory_calls.append(ev) or FakePublisher(),
            )
        self.assertEqual([], factory_calls)

    def test_report_json_artifact(self) -> None:
        out = self.root / "report.json"
        run_github(
            self.config(),
            analyzer=lambda cfg: _doc(2, severity="Error"),
            publisher_factory=lambda cfg, ev: FakePublisher(),
            report_json=out,
        )
        data = json.loads(out.read_text(encoding="utf-8"))
        self.assertEqual("failure", data["conclusion"])
        self.assertEqual({"failure": 2, "warning": 0, "notice": 0}, data["counts"])
        self.assertEqual(1, len(data["pages"]))


class TestRunGitLab(OrchestratorCase):
    def test_writes_line_records(self) -> None:
        out = self.root / "errors.txt"
        cfg = self.config(ci_env="gitlab", token=None, event_path=None)
        run_gitlab(cfg, analyzer=lambda c: _doc(2, severity="Error"), output_path=out)
        self.assertEqual(
            [
                "f0.txt:1:1:E:❌ Failure: CW1: m",
                "f1.txt:1:1:E:❌ Failure: CW1: m",
            ],
            out.read_text(encoding="utf-8").splitlines(),
        )

    def test_default_output_is_errors_txt_in_workspace(self) -> None:
        ws = str(self.root / "ws")
        cfg = self.config(ci_env="gitlab", workspace=ws, token=None, event_path=None)
        run_gitlab(cfg, analyzer=lambda c: _doc(1, workspace=ws))
        self.assertEqual(
            ["f0.txt:1:1:W:⚠️ Warning: CW1: m"],
            (Path(ws) / "errors.txt").read_text(encoding="utf-8").splitlines(),
        )

    def test_analyzer_failure_propagates(self) -> None:
        cfg = self.config(ci_env="gitlab")

        def analyzer(c):
            raise AnalyzerError("boom")

        with self.assertLogs("pipeline.orchestrator", level="ERROR"):
            with self.assertRaises(AnalyzerError):
                run_gitlab(cfg, analyzer=analyzer, output_path=self.root / "errors.txt")
        self.assertFalse((self.root / "errors.txt").exists())


class TestRun(OrchestratorCase):
    def test_gitlab_with_result_file(self) -> None:
        result = self.root / "output.json"
        result.write_text(json.dumps(_doc(3, severity="Hint")), encoding="utf-8")
        out = self.root / "errors.txt"
        report = run(
            self.config(ci_env="gitlab", game=""),
            result_file=result,
            output_path=out,
        )
        self.assertIs(Conclusion.SUCCESS, report.conclusion)
        self.assertEqual(3, len(out.read_text(encoding="utf-8").splitlines()))

    def test_missing_game_is_a_configuration_error(self) -> None:
        with self.assertRaises(ConfigurationError):
            run(self.config(ci_env="gitlab", game=""), output_path=self.root / "errors.txt")


if __name__ == "__main__":
    unittest.main()
