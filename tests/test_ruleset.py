import json
from pathlib import Path

import pytest

from statement_import import Ruleset, RulesetError, default_ruleset, load_ruleset
from statement_import.ruleset import KeywordRule, parse_ruleset

_KEYWORDS = {
    "date": ["when"],
    "description": ["what"],
    "amount_in": ["plus"],
    "amount_out": ["minus"],
}


def _write(path: Path, payload: dict) -> Path:
    path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
    return path


def test_default_ruleset_carries_bundled_literals():
    rules = default_ruleset()

    assert isinstance(rules, Ruleset)
    assert "overføring til sparekonto" in rules.skip_patterns
    assert rules.note_replacements["til konto: 9053 71 05460"] == "Boliglån"
    assert rules.vendor_prefixes == ("vipps*", "zettle_*", "paypal *")
    first_out = rules.column_keywords.amount_out[0]
    assert first_out == KeywordRule(keyword="ut", unless=("utført",))
    assert default_ruleset() is rules


def test_patterns_and_keys_are_lowercased():
    rules = parse_ruleset(
        json.dumps(
            {
                "name": "test",
                "skip_patterns": ["  Transfer TO Savings "],
                "note_replacements": {"MORTGAGE ACC 123": " Mortgage "},
                "column_keywords": _KEYWORDS,
                "vendor_prefixes": ["SQ *"],
            }
        )
    )

    assert rules.skip_patterns == ("transfer to savings",)
    assert rules.note_replacements == {"mortgage acc 123": "Mortgage"}
    assert rules.vendor_prefixes == ("sq *",)
    assert rules.column_keywords.date == (KeywordRule(keyword="when"),)


def test_note_replacement_order_is_preserved():
    rules = parse_ruleset(
        json.dumps(
            {
                "name": "test",
                "note_replacements": {"b": "B", "a": "A", "c": "C"},
                "column_keywords": _KEYWORDS,
            }
        )
    )

    assert list(rules.note_replacements) == ["b", "a", "c"]


@pytest.mark.parametrize(
    "payload",
    [
        {"name": "x", "column_keywords": _KEYWORDS, "unexpected": 1},
        {"name": "x"},
        {"name": "x", "column_keywords": {**_KEYWORDS, "date": []}},
        {"name": "x", "column_keywords": _KEYWORDS, "skip_patterns": ["  "]},
        {"name": "x", "column_keywords": _KEYWORDS, "note_replacements": {"a": ""}},
    ],
)
def test_invalid_rulesets_raise(payload):
    with pytest.raises(RulesetError):
        parse_ruleset(json.dumps(payload))


def test_malformed_json_raises():
    with pytest.raises(RulesetError):
        parse_ruleset("{not json")


def test_keyword_rule_matching():
    rule = KeywordRule(keyword="UT", unless=("Utført",))

    assert rule.matches("ut")
    assert rule.matches("beløp ut")
    assert not rule.matches("utført dato")
    assert not rule.matches("inn")


def test_load_ruleset_from_path(tmp_path: Path):
    path = _write(tmp_path / "bank.json", {"name": "bank", "column_keywords": _KEYWORDS})

    rules = load_ruleset(path)

    assert rules.name == "bank"
    assert rules.skip_patterns == ()


def test_load_ruleset_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    path = _write(tmp_path / "env.json", {"name": "from-env", "column_keywords": _KEYWORDS})
    monkeypatch.setenv("STATEMENT_IMPORT_RULESET", str(path))

    assert load_ruleset().name == "from-env"


def test_load_ruleset_defaults_to_bundled():
    assert load_ruleset() is default_ruleset()


def test_missing_ruleset_file_raises(tmp_path: Path):
    with pytest.raises(RulesetError):
        load_ruleset(tmp_path / "missing.json")


def test_ruleset_error_is_a_value_error():
    assert issubclass(RulesetError, ValueError)
