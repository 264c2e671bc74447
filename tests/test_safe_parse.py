from counsellor.utils import parse_llm_json, safe_parse, safe_parse_array, safe_parse_object


class TestSafeParse:
    def test_valid_json(self):
        assert safe_parse('{"a": 1}', {}) == {"a": 1}

    def test_empty_and_none_return_fallback(self):
        assert safe_parse("", "fallback") == "fallback"
        assert safe_parse(None, []) == []

    def test_malformed_returns_fallback(self):
        assert safe_parse("{not json", {"ok": False}, context="profile") == {"ok": False}

    def test_object_wrapper_rejects_arrays(self):
        assert safe_parse_object("[1, 2]") == {}
        assert safe_parse_object('{"personalProfile": {}}') == {"personalProfile": {}}

    def test_array_wrapper_rejects_objects(self):
        assert safe_parse_array('{"a": 1}') == []
        assert safe_parse_array('["Learned x"]') == ["Learned x"]


class TestParseLlmJson:
    def test_plain_object(self):
        assert parse_llm_json('{"relationships": {"partner_name": "Sam"}}') == {
            "relationships": {"partner_name": "Sam"}
        }

    def test_repairs_trailing_comma(self):
        assert parse_llm_json('{"goalsPlans": {"milestones": "5k"},}') == {
            "goalsPlans": {"milestones": "5k"}
        }

    def test_empty_output(self):
        assert parse_llm_json("") == {}
        assert parse_llm_json(None) == {}
        assert parse_llm_json("   ") == {}

    def test_non_object_output(self):
        assert parse_llm_json("[1, 2, 3]") == {}
