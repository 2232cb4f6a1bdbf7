from structlog.testing import capture_logs

from deckhand.protocol import ToolInvocation, parse_tool_calls


def test_no_tags_returns_empty_list():
    assert parse_tool_calls("Just some prose, no tools here.") == []
    assert parse_tool_calls("") == []


def test_paired_tag_with_attributes_and_trimmed_body():
    text = 'Sure.\n<tool name="propose_edit" path="src/app.py" description="Add main">\n\nprint("hi")\n\n</tool>'
    calls = parse_tool_calls(text)

    assert calls == [
        ToolInvocation(
            name="propose_edit",
            parameters={"path": "src/app.py", "description": "Add main"},
            body='print("hi")',
        )
    ]


def test_self_closing_tag_has_empty_body():
    calls = parse_tool_calls('<tool name="read_file" path="README.md"/>')

    assert len(calls) == 1
    assert calls[0].name == "read_file"
    assert calls[0].parameters == {"path": "README.md"}
    assert calls[0].body == ""


def test_mixed_forms_keep_source_order():
    text = (
        '<tool name="read_file" path="a.txt"/>\n'
        '<tool name="propose_edit" path="b.txt">content b</tool>\n'
        '<tool name="run_command" command="ls -la" />\n'
        '<tool name="propose_edit" path="c.txt">content c</tool>'
    )
    calls = parse_tool_calls(text)

    assert [c.name for c in calls] == ["read_file", "propose_edit", "run_command", "propose_edit"]
    assert [c.parameters.get("path") for c in calls] == ["a.txt", "b.txt", None, "c.txt"]
    assert calls[2].parameters == {"command": "ls -la"}


def test_unknown_attributes_are_preserved_verbatim():
    calls = parse_tool_calls('<tool name="custom" foo="1" bar-baz="x y" empty=""/>')

    assert calls[0].parameters == {"foo": "1", "bar-baz": "x y", "empty": ""}


def test_unterminated_tag_is_skipped_without_swallowing_next_call():
    text = (
        '<tool name="propose_edit" path="broken.py">def half(\n'
        "and the generation stopped here\n"
        '<tool name="read_file" path="ok.txt"/>'
    )
    calls = parse_tool_calls(text)

    assert [c.name for c in calls] == ["read_file"]
    assert calls[0].parameters == {"path": "ok.txt"}


def test_malformed_fragments_never_raise():
    garbage = [
        "<tool",
        '<tool name="x"',
        "<tool name=unquoted/>",
        '<tool name="">body</tool>',
        "</tool></tool>",
        '<tool name="a" path="unterminated>',
        None,
        12345,
    ]
    for text in garbage:
        assert parse_tool_calls(text) == []


def test_closing_tag_match_is_case_insensitive():
    calls = parse_tool_calls('<TOOL name="read_file" path="x"></Tool>')

    assert len(calls) == 1
    assert calls[0].body == ""


def test_empty_body_for_content_tool_logs_warning_without_changing_output():
    with capture_logs() as logs:
        calls = parse_tool_calls('<tool name="propose_edit" path="a.py">   \n  </tool>')

    assert calls == [ToolInvocation(name="propose_edit", parameters={"path": "a.py"}, body="")]
    warnings = [entry for entry in logs if entry["log_level"] == "warning"]
    assert len(warnings) == 1
    assert warnings[0]["tool"] == "propose_edit"


def test_empty_body_for_other_tools_is_silent():
    with capture_logs() as logs:
        parse_tool_calls('<tool name="list_files" path="."></tool>')

    assert not [entry for entry in logs if entry["log_level"] == "warning"]


def test_content_tools_override():
    with capture_logs() as logs:
        parse_tool_calls('<tool name="write_notes"></tool>', content_tools=["write_notes"])

    assert any(entry.get("tool") == "write_notes" for entry in logs)


def test_invocation_get_uses_first_present_alias():
    call = ToolInvocation(name="edit_section", parameters={"old_text": "a"})

    assert call.get("oldText", "old_text") == "a"
    assert call.get("newText", "new_text", default="-") == "-"


def test_redirects_inside_attribute_values():
    calls = parse_tool_calls(
        '<tool name="run_command" command="npm test 2>&1"/>\n'
        '<tool name="run_command" command="echo hi > out.txt"></tool>'
    )

    assert calls == [
        ToolInvocation(name="run_command", parameters={"command": "npm test 2>&1"}),
        ToolInvocation(name="run_command", parameters={"command": "echo hi > out.txt"}),
    ]


def test_paired_tag_with_angle_bracket_attribute_keeps_body():
    calls = parse_tool_calls('<tool name="propose_edit" path="a.sh" description="x -> y">cat a > b</tool>')

    assert calls[0].parameters == {"path": "a.sh", "description": "x -> y"}
    assert calls[0].body == "cat a > b"


def test_body_may_mention_tool_markup_that_is_not_a_complete_tag():
    text = '<tool name="propose_edit" path="notes.md">Use <tool name=...> tags to call tools.</tool>'

    calls = parse_tool_calls(text)

    assert calls[0].body == "Use <tool name=...> tags to call tools."


def test_unterminated_tag_is_logged():
    with capture_logs() as logs:
        calls = parse_tool_calls('<tool name="propose_edit" path="cut.py">def f(\n<tool name="read_file" path="x"/>')

    assert [c.name for c in calls] == ["read_file"]
    skipped = [entry for entry in logs if entry["event"] == "Skipping unterminated tool tag"]
    assert len(skipped) == 1
    assert skipped[0]["fragment"] == '<tool name="propose_edit" path="cut.py">'
