"""Tests for relationship classification."""

import pytest

from lexingest.models import PartOfSpeech, Provenance, RelationshipType
from lexingest.resolver import (
    Resolution,
    classify_cross_reference,
    classify_inflection,
    describe,
    form_definition,
    part_of_speech_for,
    resolve,
)

RT = RelationshipType


class TestVerbPatterns:

    @pytest.mark.parametrize("form,base", [
        ("walking", "walk"), ("running", "run"), ("being", "be"), ("ring", None),
    ])
    def test_ing_is_present_participle(self, form, base):
        assert classify_inflection(form, base, part_of_speech=PartOfSpeech.VERB) \
            is RT.PRESENT_PARTICIPLE_EN

    @pytest.mark.parametrize("base", ["walk", "jump", "play"])
    def test_base_plus_ed_is_past_tense(self, base):
        assert classify_inflection(base + "ed", base) is RT.PAST_TENSE_EN

    def test_third_person(self):
        assert classify_inflection("walks", "walk", part_of_speech=PartOfSpeech.VERB) \
            is RT.THIRD_PERSON_EN
        assert classify_inflection("watches", "watch") is RT.THIRD_PERSON_EN
        assert classify_inflection("goes", "go") is RT.THIRD_PERSON_EN

    def test_s_ending_of_wrong_length_is_unclassified(self):
        assert classify_inflection("walkers", "walk") is None

    def test_label_beats_pattern(self):
        assert classify_inflection("walked", "walk", "past participle") \
            is RT.PAST_PARTICIPLE_EN
        assert classify_inflection("took", "take", "past tense") is RT.PAST_TENSE_EN

    def test_unknown_label_falls_back_to_pattern(self):
        assert classify_inflection("walking", "walk", "also") is RT.PRESENT_PARTICIPLE_EN


class TestOtherPartsOfSpeech:

    @pytest.mark.parametrize("pos", [
        PartOfSpeech.PRONOUN, PartOfSpeech.PREPOSITION, PartOfSpeech.CONJUNCTION,
    ])
    def test_verb_endings_only_for_verbs(self, pos):
        assert classify_inflection("nothing", "no", None, pos) is None
        assert classify_inflection("ours", "our", None, pos) is None
        assert classify_inflection("used", "use", None, pos) is None

    def test_verb_endings_for_unknown_part_of_speech(self):
        assert classify_inflection("walking", "walk", None, PartOfSpeech.UNDEFINED) \
            is RT.PRESENT_PARTICIPLE_EN

    def test_noun_plural_needs_label(self):
        assert classify_inflection("cats", "cat", "plural", PartOfSpeech.NOUN) is RT.PLURAL_EN
        assert classify_inflection("cats", "cat", None, PartOfSpeech.NOUN) is None

    def test_adjective_grades(self):
        assert classify_inflection("taller", "tall", None, PartOfSpeech.ADJECTIVE) \
            is RT.COMPARATIVE_EN
        assert classify_inflection("tallest", "tall", None, PartOfSpeech.ADJECTIVE) \
            is RT.SUPERLATIVE_EN
        assert classify_inflection("better", "good", "comparative", PartOfSpeech.ADJECTIVE) \
            is RT.COMPARATIVE_EN


class TestCrossReference:

    @pytest.mark.parametrize("label,expected,form", [
        ("past tense and past participle of", RT.PAST_TENSE_EN,
         "Past tense and past participle"),
        ("past participle of", RT.PAST_PARTICIPLE_EN, "Past participle"),
        ("past tense of", RT.PAST_TENSE_EN, "Past tense"),
        ("present participle of", RT.PRESENT_PARTICIPLE_EN, "Present participle"),
        ("third person singular of", RT.THIRD_PERSON_EN, "Third person singular"),
        ("less common spelling of", RT.ALTERNATIVE_SPELLING, "Less common spelling"),
    ])
    def test_keyword_table(self, label, expected, form):
        assert classify_cross_reference(label) == (expected, form)

    def test_unmatched_label(self):
        assert classify_cross_reference("see also") is None
        assert resolve(Provenance.CROSS_REFERENCE, label="compare") is None


class TestResolve:

    def test_inflection_pairs_with_related(self):
        res = resolve(Provenance.INFLECTION, form="walking", base="walk",
                      part_of_speech=PartOfSpeech.VERB)
        assert res == Resolution(RT.PRESENT_PARTICIPLE_EN, True)
        assert res.types == (RT.PRESENT_PARTICIPLE_EN, RT.RELATED)

    def test_unclassified_inflection_is_related_only(self):
        res = resolve(Provenance.INFLECTION, form="cats", base="cat",
                      part_of_speech=PartOfSpeech.NOUN)
        assert res.types == (RT.RELATED,)

    @pytest.mark.parametrize("provenance,types", [
        (Provenance.VARIANT, (RT.ALTERNATIVE_SPELLING, RT.RELATED)),
        (Provenance.SYNONYM, (RT.SYNONYM,)),
        (Provenance.ANTONYM, (RT.ANTONYM,)),
        (Provenance.PHRASAL_VERB, (RT.PHRASAL_VERB, RT.RELATED)),
        (Provenance.PHRASAL_VERB_VARIANT, (RT.VARIANT_FORM_PHRASAL_VERB_EN,)),
        (Provenance.PHRASE, (RT.PHRASE, RT.RELATED)),
        (Provenance.RUN_ON, (RT.STEM, RT.RELATED)),
    ])
    def test_fixed_provenances(self, provenance, types):
        assert resolve(provenance).types == types

    def test_run_on_inflection(self):
        assert resolve(Provenance.RUN_ON_INFLECTION, label="plural").types == \
            (RT.PLURAL_EN, RT.RELATED)
        assert resolve(Provenance.RUN_ON_INFLECTION, label="or").types == (RT.RELATED,)


class TestHelpers:

    def test_describe(self):
        assert describe(RT.PAST_TENSE_EN) == "Past tense form"
        assert describe(RT.VARIANT_FORM_PHRASAL_VERB_EN) == "Variant form of phrasal verb"

    def test_part_of_speech_for(self):
        assert part_of_speech_for(RT.THIRD_PERSON_EN) is PartOfSpeech.VERB
        assert part_of_speech_for(RT.PLURAL_EN) is PartOfSpeech.NOUN
        assert part_of_speech_for(RT.PHRASE) is PartOfSpeech.PHRASE
        assert part_of_speech_for(RT.SYNONYM) is None

    def test_form_definition(self):
        assert form_definition(RT.PRESENT_PARTICIPLE_EN, "walk", PartOfSpeech.VERB) == \
            'Present participle form of the verb "walk"'
        assert form_definition(RT.PLURAL_EN, "cat", PartOfSpeech.NOUN) == \
            'Plural form of "cat"'
        assert form_definition(RT.RELATED, "cat") is None
