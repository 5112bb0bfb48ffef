import json
import os

from playgen.generation.trace import PipelineTrace


def read_trace(trace):
    with open(trace.filepath, encoding="utf-8") as f:
        return json.load(f)


def test_steps_are_recorded_and_finalized(trace_dir):
    trace = PipelineTrace({"profileName": "Sarah"})
    complete = trace.start_step("spec_generation")
    complete(parsed={"title": "x"}, final_config=None)
    trace.add_step("critic", 2, result={"pass": False})
    trace.finalize("error")

    data = read_trace(trace)
    assert os.path.dirname(trace.filepath) == str(trace_dir)
    assert data["status"] == "error"
    assert data["runId"] == trace.run_id
    first, second = data["steps"]
    assert first["step"] == "spec_generation"
    assert "durationMs" in first
    assert "finalConfig" not in first
    assert second["iteration"] == 2
    assert trace.finalized


def test_flush_rewrites_file_in_place(trace_dir):
    trace = PipelineTrace({})
    trace.add_step("validation", 1)
    trace.flush()
    trace.add_step("revision", 1)
    trace.flush()
    assert len(os.listdir(trace_dir)) == 1
    assert [s["step"] for s in read_trace(trace)["steps"]] == ["validation", "revision"]


def test_write_failures_never_raise(tmp_path, capsys):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file in the way")

    trace = PipelineTrace({}, trace_dir=str(blocker / "traces"))
    trace.add_step("complete")
    trace.flush()
    trace.finalize()

    assert trace.finalized
    assert "[Trace] Warning" in capsys.readouterr().out
