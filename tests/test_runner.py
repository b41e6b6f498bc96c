import json

import pytest

from src.companion.errors import CompanionError
from src.companion.handler import ChatHandler
from src.companion.runner import main, run_case_file

from tests.fakes import StubLoader, StubUpstream


def _case_file(tmp_path, data):
    p = tmp_path / "cases.json"
    p.write_text(json.dumps(data), encoding="utf-8")
    return str(p)


def test_runner_replays_cases_and_writes_jsonl(tmp_path, config, calm_goal):
    loader = StubLoader(goals=[calm_goal])
    handler = ChatHandler(config, goal_loader=loader, upstream=StubUpstream(text="I hear you..."))
    path = _case_file(tmp_path, {
        "defaults": {"userId": "u1"},
        "cases": [
            {"id": "anxious", "message": "I'm feeling anxious"},
            {"message": "hello", "userId": ""},
        ],
    })
    out_dir = tmp_path / "out"

    envelopes = run_case_file(path, handler=handler, output_dir=out_dir)

    assert [e["meta"]["case_id"] for e in envelopes] == ["anxious", "case_02"]
    assert envelopes[0]["output"] == {"status": 200, "body": {"response": "I hear you..."}}
    assert envelopes[1]["input"] == {"message": "hello"}
    assert loader.calls == ["u1", None]

    files = list(out_dir.glob("chat_*.jsonl"))
    assert len(files) == 1
    assert len(files[0].read_text(encoding="utf-8").splitlines()) == 2


def test_runner_stops_on_first_failure(tmp_path, config):
    handler = ChatHandler(config, goal_loader=StubLoader(), upstream=StubUpstream())
    path = _case_file(tmp_path, {"cases": [{"id": "empty", "message": ""}, {"message": "hi"}]})

    with pytest.raises(CompanionError):
        run_case_file(path, handler=handler, output_dir=tmp_path / "out")


def test_runner_continue_on_error(tmp_path, config):
    handler = ChatHandler(config, goal_loader=StubLoader(), upstream=StubUpstream())
    path = _case_file(tmp_path, {"cases": [{"message": ""}, {"message": "hi"}]})

    envelopes = run_case_file(path, continue_on_error=True, handler=handler, output_dir=tmp_path / "out")
    assert [e["output"]["status"] for e in envelopes] == [500, 200]


def test_runner_rejects_empty_case_list(tmp_path, config):
    path = _case_file(tmp_path, {"cases": []})
    with pytest.raises(CompanionError):
        run_case_file(path, handler=ChatHandler(config), output_dir=tmp_path / "out")


def test_main_returns_nonzero_when_a_case_fails(tmp_path, config):
    handler = ChatHandler(config, goal_loader=StubLoader(), upstream=StubUpstream())
    path = _case_file(tmp_path, {"cases": [{"message": ""}, {"message": "hi"}]})
    out_dir = tmp_path / "out"

    assert main([path, "--continue", "--output-dir", str(out_dir)], handler=handler) == 1
    assert main([path, "--output-dir", str(out_dir)], handler=handler) == 1
    assert len(list(out_dir.glob("chat_*.jsonl"))) >= 1


def test_main_returns_zero_when_all_cases_pass(tmp_path, config):
    handler = ChatHandler(config, goal_loader=StubLoader(), upstream=StubUpstream())
    path = _case_file(tmp_path, {"cases": [{"message": "hi"}]})
    assert main([path, "--output-dir", str(tmp_path / "out")], handler=handler) == 0


def test_main_requires_case_file():
    with pytest.raises(SystemExit) as ei:
        main([])
    assert ei.value.code == 2
