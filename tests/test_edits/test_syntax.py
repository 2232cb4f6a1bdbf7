from deckhand.syntax import (
    SyntaxCheckResult,
    check_syntax,
    is_checkable,
    register_checker,
    unregister_checker,
)


def test_python_syntax_errors_report_location():
    result = check_syntax("pkg/mod.py", "def f(:\n    pass\n")

    assert result.valid is False
    assert result.errors[0].startswith("Line 1:")


def test_valid_python_passes():
    assert check_syntax("mod.py", "def f():\n    return 1\n").valid


def test_json_and_yaml_checks():
    assert check_syntax("data.json", '{"a": 1}').valid
    assert not check_syntax("data.json", '{"a": 1,}').valid
    assert check_syntax("conf.yaml", "a:\n  b: 1\n").valid
    assert not check_syntax("conf.yml", "a: [1, 2\n").valid


def test_unsupported_language_is_permissive():
    result = check_syntax("main.rs", "fn main( {")

    assert result == SyntaxCheckResult(valid=True)
    assert not is_checkable("main.rs")


def test_custom_checker_can_be_registered():
    def reject_tabs(content: str) -> SyntaxCheckResult:
        if "\t" in content:
            return SyntaxCheckResult(valid=False, errors=["tabs are not allowed"])
        return SyntaxCheckResult(valid=True)

    register_checker("mk", reject_tabs)
    try:
        assert is_checkable("build.mk")
        assert check_syntax("build.mk", "all:\n\techo hi\n").errors == ["tabs are not allowed"]
    finally:
        unregister_checker(".mk")
    assert check_syntax("build.mk", "\t").valid
