import pytest

from common.rule_analysis.config import EngineConfig
from common.rule_analysis.filtering import (
    criteria_for_analysis,
    filter_entries,
    usage_matches,
    usage_tokens,
)
from common.rule_analysis.vocabulary import Translator


def test_usage_tokens_split_on_separators():
    assert usage_tokens("Office, Retail/Assembly;  Hall") == {"office", "retail", "assembly", "hall"}


@pytest.mark.parametrize("usage", ["", "   ", "Bitte auswaehlen", "bitte auswählen", "Please select"])
@pytest.mark.parametrize("fulfillability", ["", "Bitte auswaehlen"])
def test_blank_or_placeholder_fields_always_pass(make_entry, usage, fulfillability):
    entry = make_entry(usage=usage, fulfillability=fulfillability)
    assert filter_entries([entry], ["Garage"], ["Heavy"]) == [entry]


def test_single_word_usage_needs_one_shared_word(make_entry):
    entry = make_entry(usage="Office")
    assert filter_entries([entry], ["Office Building"], ["Light"]) == [entry]


def test_multi_word_usage_needs_two_shared_words(make_entry):
    entry = make_entry(usage="Residential Office")
    assert filter_entries([entry], ["Office"], ["Light"]) == []
    assert filter_entries([entry], ["Office", "Residential"], ["Light"]) == [entry]


def test_selected_usage_words_are_pooled_across_tags(make_entry):
    entry = make_entry(usage="Retail / Office / Storage")
    assert filter_entries([entry], ["Small Office", "Retail"], ["Light"]) == [entry]


def test_usage_match_is_case_insensitive(make_entry):
    entry = make_entry(usage="OFFICE")
    assert filter_entries([entry], ["office"], ["Light"]) == [entry]


def test_usage_without_overlap_is_excluded():
    assert usage_matches("Garage", {"office"}) is False


def test_fulfillability_is_exact_membership(make_entry):
    exact = make_entry(fulfillability=" light ")
    partial = make_entry(fulfillability="Light Medium")
    other = make_entry(fulfillability="Heavy")
    result = filter_entries([exact, partial, other], ["Office"], ["Light", "Medium"])
    assert result == [exact]


def test_both_conditions_must_hold(make_entry):
    entry = make_entry(usage="Office", fulfillability="Heavy")
    assert filter_entries([entry], ["Office"], ["Light"]) == []


def test_empty_selection_matches_nothing(make_entry):
    entry = make_entry()
    assert filter_entries([entry], [], ["Light"]) == []
    assert filter_entries([entry], ["Office"], []) == []


def test_input_order_is_preserved(make_entry):
    entries = [make_entry(outline=str(i), usage="Office") for i in range(5)]
    assert filter_entries(list(reversed(entries)), ["Office"], ["Light"]) == list(reversed(entries))


def test_custom_columns_and_placeholders(make_entry):
    config = EngineConfig.model_validate(
        {"columns": {"usage": "Use"}, "placeholders": ["n/a"]}
    )
    entry = make_entry(Use="n/a")
    assert filter_entries([entry], ["Office"], ["Light"], config=config) == [entry]


def test_criteria_translate_and_normalize(make_analysis, vocabulary):
    analysis = make_analysis(new_use='{"Office","Retail"}', fulfillability="Light, Medium")
    criteria = criteria_for_analysis(analysis, Translator(vocabulary))
    assert criteria.new_use == ["Büro", "Verkaufsstätte"]
    assert criteria.fulfillability == ["Leicht", "Mittel"]
    assert not criteria.is_empty


def test_criteria_overrides_replace_stored_selection(make_analysis, vocabulary):
    analysis = make_analysis()
    criteria = criteria_for_analysis(
        analysis,
        Translator(vocabulary),
        new_use=["Retail"],
        fulfillability="Medium",
    )
    assert criteria.new_use == ["Verkaufsstätte"]
    assert criteria.fulfillability == ["Mittel"]


def test_criteria_empty_when_nothing_selected(make_analysis):
    criteria = criteria_for_analysis(make_analysis(new_use=[], fulfillability=[]), Translator())
    assert criteria.is_empty


def test_criteria_in_rule_book_language_are_not_translated(make_analysis, vocabulary):
    analysis = make_analysis(new_use=["Büro", "Office"], fulfillability=["Leicht"], language="de")
    criteria = criteria_for_analysis(analysis, Translator(vocabulary))
    assert criteria.new_use == ["Büro", "Office"]
    assert criteria.fulfillability == ["Leicht"]
