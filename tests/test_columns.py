from statement_import import ColumnMapping, detect_column_mapping
from statement_import.ruleset import ColumnKeywords


def test_detects_norwegian_headers():
    mapping = detect_column_mapping(["Dato", "Beskrivelse", "Inn", "Ut"])

    assert mapping == ColumnMapping(
        date="Dato", description="Beskrivelse", amount_in="Inn", amount_out="Ut"
    )


def test_detects_english_headers_case_insensitively():
    mapping = detect_column_mapping(["BOOKING DATE", "Description", "Credit", "Debit", "Balance"])

    assert mapping == ColumnMapping(
        date="BOOKING DATE", description="Description", amount_in="Credit", amount_out="Debit"
    )


def test_three_of_four_roles_is_absent():
    assert detect_column_mapping(["Dato", "Beskrivelse", "Inn"]) is None
    assert detect_column_mapping(["Dato", "Beskrivelse", "Ut"]) is None
    assert detect_column_mapping([]) is None


def test_first_matching_header_wins_each_role():
    mapping = detect_column_mapping(
        ["Bokført dato", "Rentedato", "Tekst", "Beskrivelse", "Innskudd", "Inn", "Uttak", "Ut"]
    )

    assert mapping == ColumnMapping(
        date="Bokført dato", description="Tekst", amount_in="Innskudd", amount_out="Uttak"
    )


def test_executed_header_is_not_a_debit_column():
    # "Utført dato" contains "ut" but means "executed date".
    mapping = detect_column_mapping(["Utført dato", "Beskrivelse", "Inn", "Ut"])

    assert mapping is not None
    assert mapping.date == "Utført dato"
    assert mapping.amount_out == "Ut"


def test_executed_header_alone_does_not_fill_debit_role():
    assert detect_column_mapping(["Utført dato", "Beskrivelse", "Inn"]) is None


def test_one_header_cannot_fill_two_roles():
    # "Inn/ut" matches both credit and debit keywords.
    assert detect_column_mapping(["Dato", "Beskrivelse", "Inn/ut"]) is None


def test_custom_keywords():
    keywords = ColumnKeywords.model_validate(
        {
            "date": ["when"],
            "description": ["what"],
            "amount_in": ["plus"],
            "amount_out": [{"keyword": "minus", "unless": ["minus total"]}],
        }
    )

    mapping = detect_column_mapping(["When", "What", "Plus", "Minus total", "Minus"], keywords)

    assert mapping == ColumnMapping(
        date="When", description="What", amount_in="Plus", amount_out="Minus"
    )
    # The default keywords know nothing about these headers.
    assert detect_column_mapping(["When", "What", "Plus", "Minus"]) is None


def test_manual_mapping_must_name_four_distinct_headers():
    headers = ["When", "What", "Plus", "Minus"]

    ok = ColumnMapping.for_headers(
        headers, date="When", description="What", amount_in="Plus", amount_out="Minus"
    )
    assert ok is not None
    assert ok.columns() == ("When", "What", "Plus", "Minus")

    assert (
        ColumnMapping.for_headers(
            headers, date="When", description="What", amount_in="Plus", amount_out=None
        )
        is None
    )
    assert (
        ColumnMapping.for_headers(
            headers, date="When", description="What", amount_in="Plus", amount_out="Plus"
        )
        is None
    )
    assert (
        ColumnMapping.for_headers(
            headers, date="When", description="What", amount_in="Plus", amount_out="Saldo"
        )
        is None
    )
