from conftest import VALID_COMPONENT
from playgen.testing import runner
from playgen.testing.policy import check_policy
from playgen.testing.runner import compile_component, run_smoke_test, strip_code_fences, validate_custom_source


def test_example_component_passes_every_gate():
    """The prompt's example component must itself be a valid component"""
    report = validate_custom_source(VALID_COMPONENT)
    assert report.passed, report.errors
    assert report.stage == "passed"


def test_missing_entry_point_never_reaches_compile(monkeypatch):
    """Policy failures stop the gates before the source is compiled"""
    def fail_compile(source):
        raise AssertionError("compile_component must not run after a policy failure")

    monkeypatch.setattr(runner, "compile_component", fail_compile)
    report = validate_custom_source("def App(rounds, h, theme, hooks):\n    return h('div')\n")
    assert report.stage == "policy"
    assert any("entry point" in e for e in report.errors)


def frame_walk_component(marker):
    return (
        "def Game(rounds, h, theme, hooks):\n"
        "    def gen():\n"
        "        yield g.gi_frame.f_back.f_back.f_globals\n"
        "    g = gen()\n"
        "    glb = next(g)\n"
        f"    glb['sys'].modules['posix'].system('echo PWNED > {marker}')\n"
        "    return h('div')\n"
    )


def test_frame_walk_escape_is_blocked(tmp_path):
    """Reaching the harness globals through generator frames must not pass any gate"""
    marker = tmp_path / "escaped"
    report = validate_custom_source(frame_walk_component(marker))

    assert not report.passed
    assert report.stage == "policy"
    assert "Forbidden API used: frame introspection" in report.errors
    assert not marker.exists()


def test_compile_gate_rejects_frame_attributes_on_its_own(tmp_path):
    result = compile_component(frame_walk_component(tmp_path / "escaped"))
    assert not result.success
    assert result.error.startswith("Restricted syntax (line 3)")
    assert "frame introspection" in result.error

    traceback_walk = (
        "def Game(rounds, h, theme, hooks):\n"
        "    try:\n"
        "        1 / 0\n"
        "    except ZeroDivisionError as e:\n"
        "        frame = e.tb_frame\n"
        "    return h('div')\n"
    )
    assert "tb_frame" in compile_component(traceback_walk).error


def test_policy_ignores_api_names_inside_strings_and_comments():
    source = (
        "def Game(rounds, h, theme, hooks):\n"
        "    # eval(answer) would be cheating\n"
        "    hint = 'open (the box) and check os.path before you import anything'\n"
        "    return h('p', None, hint, f\"sys.exit() is {len(rounds)} lines away\")\n"
    )
    assert check_policy(source) == []


def test_policy_ignores_entry_point_inside_a_string():
    source = "text = '''\ndef Game(rounds, h, theme, hooks):\n'''\n"
    errors = check_policy(source)
    assert any("entry point" in e for e in errors)


def test_policy_reports_each_forbidden_api_once():
    source = (
        "def Game(rounds, h, theme, hooks):\n"
        "    data = open('a').read()\n"
        "    more = open('b').read()\n"
        "    eval('1')\n"
        "    return h('div')\n"
    )
    errors = check_policy(source)
    assert errors.count("Forbidden API used: open()") == 1
    assert "Forbidden API used: eval()" in errors


def test_policy_rejects_imports_and_dunders():
    source = "import os\ndef Game(rounds, h, theme, hooks):\n    return h('div', None, ().__class__)\n"
    errors = check_policy(source)
    assert "Forbidden API used: import statements" in errors
    assert "Forbidden API used: dunder names" in errors


def test_syntax_error_reported_with_line():
    result = compile_component("def Game(rounds, h, theme, hooks):\n    return h('div'\n")
    assert not result.success
    assert result.error.startswith("Syntax error (line")


def test_restricted_syntax_rejected():
    source = "def Game(rounds, h, theme, hooks):\n    class Box:\n        pass\n    return h('div')\n"
    result = compile_component(source)
    assert not result.success
    assert result.error.startswith("Restricted syntax (line 2)")


def test_private_names_rejected_but_underscore_allowed():
    ok = compile_component("def Game(rounds, h, theme, hooks):\n    for _ in range(2):\n        pass\n    return h('div')\n")
    assert ok.success, ok.error

    bad = compile_component("def Game(rounds, h, theme, hooks):\n    _secret = 1\n    return h('div')\n")
    assert not bad.success
    assert "_secret" in bad.error


def test_smoke_test_catches_render_exception():
    source = (
        "def Game(rounds, h, theme, hooks):\n"
        "    first = rounds[0]\n"
        "    return h('div', None, first)\n"
    )
    report = validate_custom_source(source)
    assert report.stage == "render"
    assert report.errors[0].startswith("Render error: IndexError")


def test_smoke_test_rejects_non_element_root():
    compiled = compile_component("def Game(rounds, h, theme, hooks):\n    return 'just text'\n")
    assert compiled.success
    result = run_smoke_test(compiled.component)
    assert not result.success
    assert "root element" in result.error


def test_smoke_test_times_out():
    compiled = compile_component("def Game(rounds, h, theme, hooks):\n    while True:\n        pass\n")
    result = run_smoke_test(compiled.component, timeout=1)
    assert not result.success
    assert "timed out" in result.error or "crashed" in result.error


def test_missing_builtin_fails_render():
    compiled = compile_component("def Game(rounds, h, theme, hooks):\n    return h('div', None, open)\n")
    assert compiled.success
    result = run_smoke_test(compiled.component)
    assert not result.success
    assert "NameError" in result.error


def test_strip_code_fences():
    assert strip_code_fences("```python\nx = 1\n```") == "x = 1"
    assert strip_code_fences("x = 1") == "x = 1"
