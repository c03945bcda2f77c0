"""Shared test fixtures for lexingest."""

import pytest

from lexingest import IngestConfig, LexiconStore


@pytest.fixture
def store():
    """Create an in-memory store for testing."""
    with LexiconStore(":memory:") as st:
        yield st


@pytest.fixture
def config():
    return IngestConfig()


def _sense(text, **extra):
    return ["sense", {"dt": [["text", text]], **extra}]


@pytest.fixture
def walk_entry():
    """A verb entry with three unlabeled inflections and one sense."""
    return {
        "meta": {"id": "walk:1", "uuid": "u-walk", "src": "learners"},
        "hwi": {"hw": "walk"},
        "fl": "verb",
        "ins": [{"if": "walks"}, {"if": "walking"}, {"if": "walked"}],
        "def": [{"sseq": [[_sense("{bc}to move on foot")]]}],
    }


@pytest.fixture
def went_entry():
    """An entry that only points at its base form."""
    return {
        "meta": {"id": "went", "uuid": "u-went", "src": "learners"},
        "hwi": {"hw": "went"},
        "fl": "verb",
        "cxs": [{
            "cxl": "past tense and past participle of",
            "cxtis": [{"cxt": "go:1"}],
        }],
    }


@pytest.fixture
def take_entry():
    """A verb entry touching every section the parser reads."""
    return {
        "meta": {
            "id": "take:1",
            "uuid": "u-take",
            "src": "learners",
            "highlight": "yes",
            "app-shortdef": {"def": ["{bc} to get into one's hands"]},
            "syns": [["grab", "seize"]],
            "ants": [["give"]],
        },
        "hwi": {
            "hw": "take",
            "prs": [{"ipa": "ˈteɪk", "sound": {"audio": "take0001"}}],
        },
        "fl": "verb",
        "et": [["text", "Middle English {it}taken{/it}"]],
        "ins": [
            {"il": "past tense", "if": "took"},
            {"il": "past participle", "if": "tak*en"},
            {"if": "tak*ing"},
        ],
        "vrs": [{"vl": "or less commonly", "va": "tayk"}],
        "def": [{"sseq": [
            [["sense", {"sn": "1", "dt": [
                ["text", "{bc}to get into one's hands"],
                ["vis", [{"t": "{it}Take{/it} my hand."}]],
            ]}]],
            [
                ["sen", {"sn": "2", "sls": ["informal"], "sgram": "+ obj"}],
                _sense("{bc}to carry"),
                _sense("{bc}to lead"),
            ],
        ]}],
        "dros": [
            {
                "drp": "take after",
                "gram": "phrasal verb",
                "def": [{"sseq": [[_sense(
                    "{bc}to resemble a parent",
                    phrasev=[{"pva": "take after (someone)"}],
                )]]}],
            },
            {
                "drp": "take it easy",
                "def": [{"sseq": [[_sense("{bc}to relax")]]}],
            },
        ],
        "uros": [{
            "ure": "tak*er",
            "fl": "noun",
            "prs": [{"sound": {"audio": "taker01"}}],
            "utxt": [["vis", [{"t": "a risk {it}taker{/it}"}]]],
            "ins": [{"il": "plural", "if": "tak*ers"}],
        }],
    }
