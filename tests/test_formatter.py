from assistant.formatter import EMPTY_FALLBACK, ResponseFormatter, format_plain_list

from conftest import FakeLLM


DATA = {
    "places": [{"name": "Cafe Xoho", "address": "17 Gordon St"}, {"name": "Gordon Beach"}],
    "events": [{"name": "Jazz", "date": "2026-10-17"}, {"name": "Mystery Show"}],
}


def test_plain_list_layout():
    assert format_plain_list(DATA).splitlines() == [
        "Places:",
        "- Cafe Xoho (17 Gordon St)",
        "- Gordon Beach",
        "Events:",
        "- Jazz on 2026-10-17",
        "- Mystery Show",
    ]


def test_plain_list_omits_empty_sections():
    assert format_plain_list({"events": [{"name": "Jazz", "date": "2026-10-17"}]}) == "Events:\n- Jazz on 2026-10-17"


def test_plain_list_with_nothing():
    assert format_plain_list({}) == EMPTY_FALLBACK


def test_model_phrasing_is_used():
    llm = FakeLLM(["Try Cafe Xoho on Gordon St!"])

    text = ResponseFormatter(llm).format_response(DATA, "coffee?")

    assert text == "Try Cafe Xoho on Gordon St!"
    prompt = "\n".join(m.content for m in llm.calls[0])
    assert "Cafe Xoho" in prompt
    assert '"coffee?"' in prompt


def test_model_failure_uses_plain_list():
    llm = FakeLLM([RuntimeError("quota")])

    assert ResponseFormatter(llm).format_response(DATA, "coffee?") == format_plain_list(DATA)


def test_empty_model_reply_uses_plain_list():
    assert ResponseFormatter(FakeLLM(["   "])).format_response(DATA, "q") == format_plain_list(DATA)
