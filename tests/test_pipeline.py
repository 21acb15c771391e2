import json

import pytest

from causal_loops import cli
from causal_loops.graph_orchestrator import GraphOrchestrator
from causal_loops.phases import LoopAnalysisPhase, LoopReportPhase
from causal_loops.pipeline import PipelinePhase, PipelineRunner
from causal_loops.snapshot import BoardSourceError

ITEMS = [
    {"id": "a", "type": "sticky_note", "content": "<p>Births</p>"},
    {"id": "b", "type": "sticky_note", "content": "<p>Population</p>"},
    {"id": "c", "type": "sticky_note", "content": "<p>Deaths</p>"},
]
CONNECTORS = [
    {"id": "c1", "start": {"item": "a"}, "end": {"item": "b"}, "captions": [{"content": "<p>+</p>"}]},
    {"id": "c2", "start": {"item": "b"}, "end": {"item": "a"}, "captions": [{"content": "<p>+</p>"}]},
    {"id": "c3", "start": {"item": "b"}, "end": {"item": "c"}, "captions": [{"content": "<p>+</p>"}]},
    {"id": "c4", "start": {"item": "c"}, "end": {"item": "b"}, "captions": [{"content": "<span>-</span>"}]},
]


def test_runner_rejects_non_dict_phase():
    class BrokenPhase(PipelinePhase):
        phase_name = "broken"

        def run(self, context):
            return None

    with pytest.raises(TypeError, match="broken"):
        PipelineRunner([BrokenPhase()]).run({})


def test_runner_merges_phase_outputs():
    class AddPhase(PipelinePhase):
        phase_name = "add"

        def run(self, context):
            return {"total": context.get("total", 0) + 1}

    context = PipelineRunner([AddPhase(), AddPhase()]).run({"seed": True})
    assert context["seed"] is True
    assert context["total"] == 2
    assert [entry["phase"] for entry in context["completed_phases"]] == ["add", "add"]
    assert all(entry["seconds"] >= 0 for entry in context["completed_phases"])


def test_runner_checks_required_keys():
    assert LoopAnalysisPhase.required_keys == ("graph",)
    with pytest.raises(KeyError, match="'analysis' needs context keys: graph"):
        PipelineRunner([LoopAnalysisPhase()]).run({"focus_node_id": None})


def test_analysis_and_report_phases():
    orchestrator = GraphOrchestrator()
    orchestrator.add_node("a", "<p>A</p>")
    orchestrator.add_node("b", "<p>B</p>")
    orchestrator.add_node("c", "<p>C</p>")
    orchestrator.add_connector("c1", "a", "b")
    orchestrator.add_connector("c2", "b", "a", "-")

    context = PipelineRunner([LoopAnalysisPhase(), LoopReportPhase()]).run(
        {"graph": orchestrator.graph}
    )
    report = context["loop_report"]
    assert report["summary"] == {"loop_count": 1, "reinforcing_count": 0, "balancing_count": 1}
    assert report["loops"] == [{"kind": "BALANCING", "node_ids": ["a", "b"], "summary": "BALANCING: A -> B"}]
    assert report["items"] == [
        {"id": "a", "content": "A", "has_cycle": True, "path": "A -> B", "kind": "BALANCING"},
        {"id": "b", "content": "B", "has_cycle": True, "path": "B -> A", "kind": "BALANCING"},
        {"id": "c", "content": "C", "has_cycle": False},
    ]


def test_focus_node_limits_items():
    orchestrator = GraphOrchestrator()
    orchestrator.add_node("a", "A")
    orchestrator.add_connector("c1", "a", "a")
    context = PipelineRunner([LoopAnalysisPhase()]).run({"graph": orchestrator.graph, "focus_node_id": "a"})
    assert [entry["node"].id for entry in context["node_results"]] == ["a"]

    context = PipelineRunner([LoopAnalysisPhase()]).run({"graph": orchestrator.graph, "focus_node_id": "zz"})
    assert context["node_results"] == []
    assert len(context["cycles"]) == 1


def test_run_pipeline_on_board_export(board_export):
    path = board_export(ITEMS, CONNECTORS)
    artifact = cli.run_pipeline(str(path))

    assert [loop["summary"] for loop in artifact["loops"]] == [
        "REINFORCING: Births -> Population",
        "BALANCING: Deaths -> Population",
    ]
    assert artifact["summary"]["loop_count"] == 2
    assert artifact["meta"]["node_count"] == 3
    assert artifact["meta"]["phases"] == ["snapshot", "analysis", "report"]
    assert len(artifact["items"]) == 3


def test_run_pipeline_propagates_source_errors(tmp_path):
    with pytest.raises(BoardSourceError):
        cli.run_pipeline(str(tmp_path / "missing.json"))


def test_main_writes_report(board_export, tmp_path, capsys):
    path = board_export(ITEMS, CONNECTORS)
    output = tmp_path / "out" / "report.json"
    exit_code = cli.main(["--input-path", str(path), "--output-path", str(output), "--node", "c"])

    assert exit_code == 0
    artifact = json.loads(output.read_text(encoding="utf-8"))
    assert artifact["items"] == [
        {
            "id": "c",
            "content": "Deaths",
            "has_cycle": True,
            "path": "Deaths -> Population",
            "kind": "BALANCING",
        }
    ]
    assert artifact["meta"]["focus_node_id"] == "c"
    printed = capsys.readouterr().out
    assert "Loop report saved to" in printed
    assert "loops=2" in printed


def test_main_reads_defaults_from_environment(board_export, tmp_path, monkeypatch):
    path = board_export(ITEMS, CONNECTORS)
    output = tmp_path / "env_report.json"
    monkeypatch.setenv("CAUSAL_LOOPS_BOARD_PATH", str(path))
    monkeypatch.setenv("CAUSAL_LOOPS_OUTPUT_PATH", str(output))
    assert cli.main([]) == 0
    assert output.exists()


def test_main_reports_unreadable_export(tmp_path, capsys):
    exit_code = cli.main(
        ["--input-path", str(tmp_path / "absent.json"), "--output-path", str(tmp_path / "r.json")]
    )
    assert exit_code == 1
    assert "Board export unreadable" in capsys.readouterr().out


def test_main_requires_input(monkeypatch, capsys):
    monkeypatch.delenv("CAUSAL_LOOPS_BOARD_PATH", raising=False)
    monkeypatch.setattr(cli, "load_dotenv", lambda: False)
    assert cli.main([]) == 2
    assert "No board export given" in capsys.readouterr().out


def test_split_types():
    assert cli._split_types("sticky_note, shape,,") == ["sticky_note", "shape"]


def test_main_watch_mode_reruns_report(board_export, tmp_path, monkeypatch):
    path = board_export(ITEMS, CONNECTORS)
    output = tmp_path / "watched.json"
    calls = []

    def fake_watch(board_path, on_change, interval):
        calls.append((board_path, interval))
        on_change(board_path)
        raise KeyboardInterrupt

    monkeypatch.setattr(cli, "watch_board", fake_watch)
    exit_code = cli.main(
        ["--input-path", str(path), "--output-path", str(output), "--watch", "--interval", "0.25"]
    )
    assert exit_code == 0
    assert calls == [(str(path), 0.25)]
    assert output.exists()


def test_main_reports_wrongly_shaped_export(board_export, tmp_path, capsys):
    path = board_export(ITEMS, [{"id": "c1", "start": "a", "end": {"item": "b"}}])
    exit_code = cli.main(["--input-path", str(path), "--output-path", str(tmp_path / "r.json")])
    assert exit_code == 1
    assert "'start' must be an object" in capsys.readouterr().out


def test_watch_mode_survives_wrongly_shaped_export(tmp_path, monkeypatch, capsys):
    path = tmp_path / "board.json"
    path.write_text(json.dumps({"items": [], "connectors": None}), encoding="utf-8")

    def fake_watch(board_path, on_change, interval):
        on_change(board_path)
        on_change(board_path)

    monkeypatch.setattr(cli, "watch_board", fake_watch)
    assert cli.main(["--input-path", str(path), "--output-path", str(tmp_path / "r.json"), "--watch"]) == 0
    assert capsys.readouterr().out.count("Board export unreadable") == 2


@pytest.mark.parametrize(
    "argv, env",
    [
        (["--log-level", "chatty"], {}),
        ([], {"CAUSAL_LOOPS_LOG_LEVEL": "loud"}),
        (["--interval", "soon"], {}),
        (["--interval", "0"], {}),
        ([], {"CAUSAL_LOOPS_WATCH_INTERVAL": "fast"}),
    ],
)
def test_bad_settings_are_usage_errors(monkeypatch, capsys, argv, env):
    monkeypatch.setattr(cli, "load_dotenv", lambda: False)
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    with pytest.raises(SystemExit) as excinfo:
        cli.parse_args(["--input-path", "board.json", *argv])
    assert excinfo.value.code == 2
    err = capsys.readouterr().err
    assert "invalid" in err or "must be positive" in err


def test_settings_are_normalised(monkeypatch):
    monkeypatch.setattr(cli, "load_dotenv", lambda: False)
    monkeypatch.setenv("CAUSAL_LOOPS_WATCH_INTERVAL", "2.5")
    args = cli.parse_args(["--log-level", "debug"])
    assert args.log_level == "DEBUG"
    assert args.interval == 2.5
