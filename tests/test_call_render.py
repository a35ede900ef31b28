from __future__ import annotations

import io

import pytest

from abi_format import ABIKind, RangeError, parameter
from call_render import PLAIN_PALETTE, RED_BACKGROUND, RESET, FormattedScope, Palette, format_function_call_test
from case_store import Arguments, DisplayMode, Expectations, FunctionCall, FunctionCallTest


U256 = parameter(ABIKind.UNSIGNED_INTEGER)


def _test(w, mode=DisplayMode.SINGLE_LINE, value=0, expected=(3,), failure=False):
    call = FunctionCall(
        signature="f(uint256,uint256)",
        value=value,
        arguments=Arguments(raw_bytes=w(1) + w(2), parameters=(U256, U256)),
        expectations=Expectations(
            raw_bytes=b"".join(w(v) for v in expected),
            parameters=tuple(U256 for _ in expected),
            failure=failure,
        ),
        display_mode=mode,
    )
    return FunctionCallTest(call)


def test_single_line_expected(w):
    text = format_function_call_test(_test(w), render_result=True)
    assert text == "// f(uint256,uint256): 1, 2 -> 3\n"


def test_line_prefix_and_value(w):
    text = format_function_call_test(_test(w, value=5), line_prefix="  ", render_result=True)
    assert text == "  // f(uint256,uint256), 5 ether: 1, 2 -> 3\n"


def test_multi_line_layout(w):
    text = format_function_call_test(_test(w, mode=DisplayMode.MULTI_LINE), line_prefix="> ", render_result=True)
    assert text == "> // f(uint256,uint256): 1, 2\n> // ->\n> // 3\n"


def test_obtained_side_renders_actual_bytes(w):
    test = _test(w)
    test.record(w(4), False)
    assert format_function_call_test(test, render_result=False) == "// f(uint256,uint256): 1, 2 -> 4\n"
    assert format_function_call_test(test, render_result=True) == "// f(uint256,uint256): 1, 2 -> 3\n"


def test_highlight_only_on_mismatch(w):
    test = _test(w)
    test.record(w(4), False)
    text = format_function_call_test(test, render_result=False, highlight=True)
    assert text == f"// f(uint256,uint256): 1, 2 -> {RED_BACKGROUND}4{RESET}\n"

    test.record(w(3), False)
    text = format_function_call_test(test, render_result=False, highlight=True)
    assert RED_BACKGROUND not in text


def test_highlight_markers_come_from_palette(w):
    test = _test(w)
    test.record(w(4), False)
    text = format_function_call_test(test, highlight=True, palette=Palette(highlight_begin="<<", highlight_end=">>"))
    assert text.endswith("-> <<4>>\n")


def test_failure_tokens(w):
    test = _test(w, expected=(), failure=True)
    assert format_function_call_test(test, render_result=True) == "// f(uint256,uint256): 1, 2 -> FAILURE\n"
    test.record(b"", True)
    assert format_function_call_test(test, render_result=False) == "// f(uint256,uint256): 1, 2 -> FAILURE\n"


def test_empty_result_has_no_trailing_space(w):
    test = _test(w, expected=())
    assert format_function_call_test(test, render_result=True) == "// f(uint256,uint256): 1, 2 ->\n"


def test_output_without_declared_type_is_forced(w):
    test = _test(w, expected=())
    test.record(w(7) + w(8), False)
    assert format_function_call_test(test).endswith("-> 7, 8\n")


def test_surplus_output_is_shown(w):
    test = _test(w)
    test.record(w(3) + w(9), False)
    assert format_function_call_test(test).endswith("-> 3, 9\n")


def test_short_output_is_rendered_untyped(w):
    test = _test(w, expected=(1, 2))
    test.record(w(1), False)
    assert format_function_call_test(test).endswith("-> 1\n")


def test_declared_result_wider_than_its_bytes_raises_range_error(w):
    call = FunctionCall(
        signature="f()",
        expectations=Expectations(raw_bytes=w(1), parameters=(U256, U256)),
    )
    with pytest.raises(RangeError):
        format_function_call_test(FunctionCallTest(call), render_result=True)


def test_revert_data_is_rendered_after_failure_token(w):
    test = _test(w, expected=(), failure=True)
    test.record(w(7), True)
    assert format_function_call_test(test).endswith("-> FAILURE, 7\n")

    call = FunctionCall(
        signature="g()",
        expectations=Expectations(raw_bytes=w(7), parameters=(U256,), failure=True),
    )
    assert format_function_call_test(FunctionCallTest(call), render_result=True) == "// g() -> FAILURE, 7\n"


def test_plain_palette_emits_no_markers(w):
    test = _test(w)
    test.record(w(4), False)
    text = format_function_call_test(test, highlight=True, palette=PLAIN_PALETTE)
    assert text == "// f(uint256,uint256): 1, 2 -> 4\n"


def test_comments_are_rendered_only_on_request(w):
    call = FunctionCall(signature="f()", comments=("# before",), trailing_comments=("# after",))
    test = FunctionCallTest(call)
    assert format_function_call_test(test, render_result=True) == "// f() ->\n"
    assert format_function_call_test(test, render_result=True, with_comments=True) == (
        "// # before\n// f() ->\n// # after\n"
    )


def test_render_does_not_mutate_test(w):
    test = _test(w)
    test.record(w(4), True)
    before = test.outcome
    format_function_call_test(test, highlight=True)
    format_function_call_test(test, render_result=True, highlight=True)
    assert test.outcome is before


def test_formatted_scope_enabled_and_disabled():
    stream = io.StringIO()
    with FormattedScope(stream, True, ("\033[1m",)):
        stream.write("title")
    assert stream.getvalue() == f"\033[1mtitle{RESET}"

    stream = io.StringIO()
    with FormattedScope(stream, False, ("\033[1m",)):
        stream.write("title")
    assert stream.getvalue() == "title"
