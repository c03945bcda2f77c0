"""Tests for turning upstream entries into intermediate graphs."""

import logging

import pytest

from lexingest.config import IngestConfig
from lexingest.exceptions import UpstreamDataAbsent
from lexingest.models import (
    MAIN_WORD,
    PartOfSpeech,
    Provenance,
    SourceType,
    WordKey,
)
from lexingest.parser import headword_of, map_part_of_speech, parse_entry


def _key(text):
    return WordKey(text, "en")


def _edges(parsed):
    return {(e.from_word, e.to_word, e.type.value) for e in parsed.edges}


class TestMainWord:

    def test_fields(self, take_entry):
        main = parse_entry(take_entry).main_word
        assert main.text == "take"
        assert main.language == "en"
        assert main.source_id == "merriam_learners-take:1-u-take"
        assert main.variant == "1"
        assert main.is_highlighted is True
        assert main.phonetic == "ˈteɪk"
        assert main.etymology == "Middle English taken"
        assert main.audio == [
            "https://media.merriam-webster.com/audio/prons/en/us/mp3/t/take0001.mp3"
        ]

    def test_source_and_language(self, take_entry):
        parsed = parse_entry(take_entry, IngestConfig(language="en"))
        assert parsed.source is SourceType.MERRIAM_LEARNERS

        take_entry["meta"]["src"] = "int_dict"
        assert parse_entry(take_entry).source is SourceType.MERRIAM_INTERMEDIATE

    def test_highlight_absent(self, walk_entry):
        main = parse_entry(walk_entry).main_word
        assert main.is_highlighted is None
        assert main.variant == "1"
        assert main.audio == []

    def test_non_string_phonetic_coerced(self, walk_entry, caplog):
        walk_entry["hwi"]["prs"] = [{"ipa": 42}]
        with caplog.at_level(logging.WARNING, logger="lexingest.text"):
            assert parse_entry(walk_entry).main_word.phonetic == "42"
        assert "Non-string" in caplog.text

    def test_phonetic_falls_back_to_mw(self, walk_entry):
        walk_entry["hwi"]["prs"] = [{"ipa": "  ", "mw": "ˈwȯk"}]
        assert parse_entry(walk_entry).main_word.phonetic == "ˈwȯk"

    def test_malformed_source_is_user(self, walk_entry):
        walk_entry["meta"]["src"] = ["learners"]
        parsed = parse_entry(walk_entry)
        assert parsed.source is SourceType.USER
        assert parsed.main_word.source_id == "user-walk:1-u-walk"

    def test_headword_asterisks_removed(self, walk_entry):
        walk_entry["hwi"]["hw"] = "walk*er"
        assert parse_entry(walk_entry).main_word.text == "walker"


class TestDefinitions:

    def test_main_definitions(self, take_entry):
        definitions = parse_entry(take_entry).definitions
        assert [d.text for d in definitions] == [
            "to get into one's hands", "to carry", "to lead",
        ]
        first = definitions[0]
        assert first.part_of_speech is PartOfSpeech.VERB
        assert first.in_short_def
        assert [e.text for e in first.examples] == ["{it}Take{/it} my hand."]

    def test_carried_sense_metadata(self, take_entry):
        _, carry, lead = parse_entry(take_entry).definitions
        for definition in (carry, lead):
            assert definition.subject_status_labels == "informal"
            assert definition.grammatical_note == "+ obj"
            assert not definition.in_short_def

    def test_entry_level_gram_and_labels(self, walk_entry):
        walk_entry["gram"] = "plural"
        walk_entry["lbs"] = ["chiefly British"]
        definition = parse_entry(walk_entry).definitions[0]
        assert definition.grammatical_note == "plural"
        assert definition.general_labels == "chiefly British"
        assert definition.plural_only


class TestSubWords:

    def test_sub_word_order(self, take_entry):
        parsed = parse_entry(take_entry)
        assert [s.word.text for s in parsed.sub_words] == [
            "tayk", "took", "taken", "taking", "grab", "seize", "give",
            "take after", "take after (someone)", "take it easy", "taker", "takers",
        ]

    def test_variant(self, take_entry):
        sub = parse_entry(take_entry).find_sub_word(_key("tayk"))
        assert sub.provenance is Provenance.VARIANT
        assert sub.word.etymology == "or less commonly"
        assert sub.definitions[0].text == 'Variant form of "take"'

    def test_inflections(self, take_entry):
        parsed = parse_entry(take_entry)
        took = parsed.find_sub_word(_key("took"))
        assert took.word.etymology == "take"
        assert took.definitions[0].text == 'Past tense form of the verb "take"'
        taking = parsed.find_sub_word(_key("taking"))
        assert taking.definitions[0].text == 'Present participle form of the verb "take"'
        assert taking.word.source_id is None

    def test_inflection_edges(self, take_entry):
        edges = _edges(parse_entry(take_entry))
        assert (MAIN_WORD, _key("took"), "past_tense_en") in edges
        assert (MAIN_WORD, _key("taken"), "past_participle_en") in edges
        assert (MAIN_WORD, _key("taking"), "present_participle_en") in edges
        assert (MAIN_WORD, _key("taking"), "related") in edges
        assert (MAIN_WORD, _key("tayk"), "alternative_spelling") in edges

    def test_continuation_label_inherits(self, walk_entry):
        walk_entry["fl"] = "noun"
        walk_entry["hwi"]["hw"] = "cactus"
        walk_entry["ins"] = [
            {"il": "plural", "if": "cac*ti"},
            {"il": "or", "if": "cac*tus*es"},
        ]
        edges = _edges(parse_entry(walk_entry))
        assert (MAIN_WORD, _key("cacti"), "plural_en") in edges
        assert (MAIN_WORD, _key("cactuses"), "plural_en") in edges

    def test_synonyms_and_antonyms(self, take_entry):
        edges = _edges(parse_entry(take_entry))
        assert (MAIN_WORD, _key("grab"), "synonym") in edges
        assert (MAIN_WORD, _key("seize"), "synonym") in edges
        assert (MAIN_WORD, _key("give"), "antonym") in edges
        assert (MAIN_WORD, _key("give"), "related") not in edges

    def test_defined_run_ons(self, take_entry):
        parsed = parse_entry(take_entry)
        after = parsed.find_sub_word(_key("take after"))
        assert after.provenance is Provenance.PHRASAL_VERB
        assert after.definitions[0].text == "to resemble a parent"
        assert after.definitions[0].part_of_speech is PartOfSpeech.PHRASAL_VERB

        easy = parsed.find_sub_word(_key("take it easy"))
        assert easy.provenance is Provenance.PHRASE
        assert easy.definitions[0].part_of_speech is PartOfSpeech.PHRASE

        edges = _edges(parsed)
        assert (MAIN_WORD, _key("take after"), "phrasal_verb") in edges
        assert (MAIN_WORD, _key("take it easy"), "phrase") in edges

    def test_phrasal_verb_variant_shares_definition(self, take_entry):
        parsed = parse_entry(take_entry)
        variant = parsed.find_sub_word(_key("take after (someone)"))
        assert variant.provenance is Provenance.PHRASAL_VERB_VARIANT
        assert variant.definitions[0].text == "to resemble a parent"
        assert (_key("take after"), _key("take after (someone)"),
                "variant_form_phrasal_verb_en") in _edges(parsed)

    def test_undefined_run_on(self, take_entry):
        parsed = parse_entry(take_entry)
        taker = parsed.find_sub_word(_key("taker"))
        assert taker.provenance is Provenance.RUN_ON
        assert taker.word.etymology == 'Form of "take"'
        assert taker.word.audio == [
            "https://media.merriam-webster.com/audio/prons/en/us/mp3/t/taker01.mp3"
        ]
        definition = taker.definitions[0]
        assert definition.text == 'Form of "take"'
        assert definition.part_of_speech is PartOfSpeech.NOUN
        assert [e.text for e in definition.examples] == ["a risk {it}taker{/it}"]
        edges = _edges(parsed)
        assert (MAIN_WORD, _key("taker"), "stem") in edges
        assert (MAIN_WORD, _key("taker"), "related") in edges

    def test_run_on_inflection(self, take_entry):
        parsed = parse_entry(take_entry)
        takers = parsed.find_sub_word(_key("takers"))
        assert takers.definitions[0].text == 'Plural form of "taker"'
        assert takers.definitions[0].part_of_speech is PartOfSpeech.NOUN
        assert (_key("taker"), _key("takers"), "plural_en") in _edges(parsed)

    def test_sub_word_equal_to_main_skipped(self, walk_entry):
        walk_entry["ins"].append({"il": "also", "if": "walk"})
        assert _key("walk") not in {s.word.key for s in parse_entry(walk_entry).sub_words}

    def test_repeated_sub_word_merged(self, take_entry):
        take_entry["meta"]["syns"] = [["took"]]
        parsed = parse_entry(take_entry)
        assert [s.word.text for s in parsed.sub_words].count("took") == 1
        edges = _edges(parsed)
        assert (MAIN_WORD, _key("took"), "past_tense_en") in edges
        assert (MAIN_WORD, _key("took"), "synonym") in edges


class TestCrossReferences:

    def test_past_tense_cross_reference(self, went_entry):
        parsed = parse_entry(went_entry)
        assert [d.text for d in parsed.definitions] == [
            'Past tense and past participle of "go"'
        ]
        assert parsed.main_word.etymology == 'Past tense and past participle of "go"'
        go = parsed.find_sub_word(_key("go"))
        assert go.provenance is Provenance.CROSS_REFERENCE
        assert go.word.phonetic is None
        assert _edges(parsed) == {
            (_key("go"), MAIN_WORD, "past_tense_en"),
            (_key("go"), MAIN_WORD, "related"),
        }

    def test_unmatched_label_ignored(self, went_entry):
        went_entry["cxs"][0]["cxl"] = "compare"
        parsed = parse_entry(went_entry)
        assert parsed.sub_words == []
        assert parsed.definitions == []


class TestAbsentData:

    def test_suggestion_list(self):
        with pytest.raises(UpstreamDataAbsent):
            parse_entry("wlak")

    def test_missing_headword(self):
        with pytest.raises(UpstreamDataAbsent):
            parse_entry({"meta": {"id": "x"}, "hwi": {}})

    def test_headword_of(self, walk_entry):
        assert headword_of(walk_entry) == "walk"
        assert headword_of(["walk"]) is None
        assert headword_of({"hwi": "walk"}) is None


class TestPartOfSpeech:

    def test_known_values(self):
        assert map_part_of_speech("verb") is PartOfSpeech.VERB
        assert map_part_of_speech("Phrasal Verb") is PartOfSpeech.PHRASAL_VERB

    def test_unknown_value_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="lexingest.parser"):
            assert map_part_of_speech("noun phrase") is PartOfSpeech.UNDEFINED
        assert "Unknown functional label" in caplog.text

    def test_missing_value_is_silent(self, caplog):
        with caplog.at_level(logging.WARNING, logger="lexingest.parser"):
            assert map_part_of_speech(None) is PartOfSpeech.UNDEFINED
        assert caplog.text == ""
