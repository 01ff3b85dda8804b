"""Tests for the filter string and JSON formats."""

import json

import pytest

from cards.attributes import ManaType, Rarity
from filters import codec
from filters.attributes import CardAttribute
from filters.containment import Comparison, Containment
from filters.errors import (
    FilterDeserializationError,
    InvalidContainmentModeError,
    InvalidOperandError,
    MalformedFilterStringError,
    UnknownFieldError,
)
from filters.grammar import escape, join_options, split_options, unescape
from filters.group import FilterGroup, GroupMode
from filters.leaves import (
    BinaryFilter,
    ColorFilter,
    LegalityFilter,
    ManaCostFilter,
    NumberFilter,
    OptionsFilter,
    RarityFilter,
    SingletonOptionsFilter,
    TextFilter,
    TypeLineFilter,
    VariableNumberFilter,
)

SAMPLE_FILTERS = [
    TextFilter(CardAttribute.NAME, Containment.ANY_OF, "bolt"),
    TextFilter(CardAttribute.RULES_TEXT, Containment.ALL_OF, '"draw a card" discard'),
    TextFilter(CardAttribute.RULES_TEXT, Containment.ANY_OF, r"deals \d+ damage", regex=True),
    TextFilter(CardAttribute.FLAVOR_TEXT, Containment.NONE_OF, "<3 >:("),
    TextFilter(CardAttribute.RULES_TEXT, Containment.ALL_OF, "Flying\nVigilance\r\n"),
    TypeLineFilter(CardAttribute.TYPE_LINE, Containment.EXACTLY, "Legendary Creature — Elf"),
    ManaCostFilter(CardAttribute.MANA_COST, Containment.ALL_OF, "{2}{G}{G}"),
    ColorFilter(CardAttribute.COLOR_IDENTITY, Containment.ANY_OF, {ManaType.RED, ManaType.WHITE}, True),
    ColorFilter(CardAttribute.COLOR, Containment.EXACTLY, ()),
    NumberFilter(CardAttribute.MANA_VALUE, Comparison.LT, 3),
    NumberFilter(CardAttribute.CARD_NUMBER, Comparison.NE, 2.5),
    VariableNumberFilter(CardAttribute.POWER, Comparison.GE, 4),
    VariableNumberFilter(CardAttribute.LOYALTY, varies=True),
    OptionsFilter(CardAttribute.SUBTYPE, Containment.NOT_ALL_OF, {"Elf", "Warrior"}),
    OptionsFilter(CardAttribute.CARD_TYPE, Containment.ANY_OF, {"odd,name"}),
    SingletonOptionsFilter(CardAttribute.EXPANSION, Containment.ANY_OF, {"Innistrad", "Dark Ascension"}),
    RarityFilter(CardAttribute.RARITY, Containment.NONE_OF, {Rarity.COMMON, Rarity.UNCOMMON}),
    LegalityFilter(CardAttribute.FORMAT_LEGALITY, Containment.ANY_OF, {"modern"}),
    LegalityFilter(CardAttribute.FORMAT_LEGALITY, Containment.ALL_OF, {"vintage"}, restricted=True),
    BinaryFilter(CardAttribute.ANY),
    BinaryFilter(CardAttribute.NONE),
]


# ============= Grammar =============


def test_escape_round_trip():
    text = r"a <b> \c"
    assert escape(text) == r"a \<b\> \\c"
    assert unescape(escape(text)) == text


def test_escape_keeps_line_breaks_on_one_line():
    text = "draw\na card\r\n"
    escaped = escape(text)

    assert escaped == r"draw\na card\r\n"
    assert "\n" not in escaped and "\r" not in escaped
    assert unescape(escaped) == text
    assert unescape(escape(r"a\nb")) == r"a\nb"


def test_unescape_rejects_dangling_escape():
    with pytest.raises(ValueError):
        unescape("abc\\")


def test_options_escape_commas():
    joined = join_options(["a,b", "c"])
    assert joined == r"a\,b,c"
    assert split_options(joined) == ["a,b", "c"]
    assert split_options(" a , ,b ") == ["a", "b"]


# ============= String form =============


@pytest.mark.parametrize("filter", SAMPLE_FILTERS, ids=lambda f: f.code)
def test_string_round_trip(filter):
    text = codec.serialize(filter)
    parsed = codec.parse(text)

    assert parsed == filter
    assert codec.serialize(parsed) == text


def test_padded_options_are_stored_stripped():
    leaf = OptionsFilter(CardAttribute.SUBTYPE, Containment.ANY_OF, {" Elf", "Warrior ", "  "})

    assert leaf.selected == {"Elf", "Warrior"}
    assert codec.parse(codec.serialize(leaf)) == leaf
    assert codec.loads(codec.dumps(leaf)) == leaf

    leaf.selected.add(" Druid ")
    assert leaf.option_strings() == ["Druid", "Elf", "Warrior"]
    assert codec.parse(codec.serialize(leaf)) == leaf


def test_leaf_strings():
    assert str(TextFilter(CardAttribute.NAME, Containment.ANY_OF, "bolt")) == '<n:contains any of"bolt">'
    assert str(NumberFilter(CardAttribute.MANA_VALUE, Comparison.LE, 3)) == "<cmc:≤3>"
    assert str(NumberFilter(CardAttribute.MANA_VALUE, Comparison.LT, 3)) == r"<cmc:\<3>"
    assert str(ManaCostFilter(CardAttribute.MANA_COST, Containment.ALL_OF, "2GG")) == "<m:contains all of{2}{G}{G}>"
    assert str(ColorFilter(CardAttribute.COLOR, Containment.ANY_OF, {ManaType.GREEN, ManaType.WHITE}, True)) == (
        '<c:contains any of"WGM">'
    )
    assert str(OptionsFilter(CardAttribute.CARD_TYPE, Containment.ANY_OF, {"Land", "Creature"})) == (
        "<cardtype:contains any of{Creature,Land}>"
    )
    assert str(LegalityFilter(selected={"modern"}, restricted=True)) == "<legal:contains any of{modern}r>"
    assert str(VariableNumberFilter(CardAttribute.POWER, varies=True)) == "<p:*>"
    assert str(BinaryFilter()) == "<*>"


def test_nested_group_string():
    group = FilterGroup(
        [
            NumberFilter(CardAttribute.MANA_VALUE, Comparison.LE, 3),
            FilterGroup(
                [
                    ColorFilter(CardAttribute.COLOR, Containment.ANY_OF, {ManaType.GREEN}),
                    TypeLineFilter(CardAttribute.TYPE_LINE, Containment.ANY_OF, "land"),
                ],
                GroupMode.OR,
            ),
        ],
        GroupMode.AND,
    )
    text = '<AND <cmc:≤3> <OR <c:contains any of"G"> <type:contains any of"land">>>'

    assert codec.serialize(group) == text
    assert codec.parse(text) == group


def test_group_children_reserialize_to_their_substrings():
    first = '<n:contains any of"red">'
    second = "<r:contains exactly{}>"
    group = codec.parse(f"<AND {first} {second}>")

    assert isinstance(group, FilterGroup)
    assert group.mode is GroupMode.AND
    assert len(group) == 2
    assert [codec.serialize(child) for child in group] == [first, second]


def test_parse_accepts_extra_whitespace_and_lowercase_mode():
    group = codec.parse("  <or\n  <*>\t<0>  >  ")
    assert group == FilterGroup([BinaryFilter(), BinaryFilter(CardAttribute.NONE)], GroupMode.OR)


def test_parse_ascii_comparisons():
    assert codec.parse("<cmc:!=3>") == NumberFilter(CardAttribute.MANA_VALUE, Comparison.NE, 3)
    assert codec.parse(r"<cmc:\>=3>") == NumberFilter(CardAttribute.MANA_VALUE, Comparison.GE, 3)
    assert codec.parse("<CMC:≥ 3>") == NumberFilter(CardAttribute.MANA_VALUE, Comparison.GE, 3)


def test_parse_operand_with_angle_brackets():
    parsed = codec.parse(r'<o:contains any of"\<3">')
    assert parsed == TextFilter(CardAttribute.RULES_TEXT, Containment.ANY_OF, "<3")


@pytest.mark.parametrize(
    "text",
    [
        "",
        "n:bolt",
        '<n:contains any of"bolt"',
        '<n:contains any of"bolt">>',
        "<*> <0>",
        "<AND>",
        "<AND <*> junk>",
        "<n>",
        "<:x>",
        "<n:contains any of\"x\\",
    ],
)
def test_malformed_strings(text):
    with pytest.raises(MalformedFilterStringError):
        codec.parse(text)


def test_unknown_code():
    with pytest.raises(UnknownFieldError):
        codec.parse('<zz:contains any of"x">')
    with pytest.raises(UnknownFieldError):
        codec.parse('<AND <*> <OR <zz:contains any of"x">>>')


@pytest.mark.parametrize(
    "text",
    [
        "<cmc:≤three>",
        "<n:contains any of bolt>",
        "<c:contains any of\"Q\">",
        "<m:contains all of{G>",
        "<o:contains any of/(/>",
        "<legal:contains any of{modern}>",
        "<cardtype:contains any of Creature>",
        "<*:anything>",
    ],
)
def test_invalid_operands(text):
    with pytest.raises(InvalidOperandError):
        codec.parse(text)


def test_mode_not_allowed_for_field():
    with pytest.raises(InvalidContainmentModeError):
        codec.parse('<cmc:contains any of"3">')
    with pytest.raises(InvalidContainmentModeError):
        codec.parse("<n:≤3>")


# ============= Structured form =============


def test_leaf_json_shape():
    leaf = TextFilter(CardAttribute.NAME, Containment.ANY_OF, "bolt")
    assert codec.to_json(leaf) == {"type": "n", "contain": "contains any of", "text": "bolt", "regex": False}


@pytest.mark.parametrize("filter", SAMPLE_FILTERS, ids=lambda f: f.code)
def test_json_round_trip(filter):
    assert codec.loads(codec.dumps(filter)) == filter


def test_group_json_round_trip():
    group = FilterGroup(
        [
            TextFilter(CardAttribute.NAME, Containment.ANY_OF, "bolt"),
            FilterGroup([BinaryFilter(), NumberFilter()], GroupMode.OR),
        ]
    )
    document = json.loads(codec.dumps(group))

    assert document["type"] == "group"
    assert document["mode"] == "AND"
    assert codec.from_json(document) == group


@pytest.mark.parametrize(
    "document",
    [
        [],
        {"mode": "AND"},
        {"type": "group", "children": []},
        {"type": "group", "mode": "XOR", "children": [{"type": "*"}]},
        {"type": "n"},
        {"type": "n", "contain": "contains any of"},
        {"type": "sub", "contain": "contains any of", "selected": "Elf"},
    ],
)
def test_bad_documents(document):
    with pytest.raises(FilterDeserializationError):
        codec.from_json(document)


def test_json_errors_keep_their_kind():
    with pytest.raises(UnknownFieldError):
        codec.from_json({"type": "zz"})
    with pytest.raises(InvalidOperandError):
        codec.from_json({"type": "cmc", "operation": "≤", "operand": "abc"})
    with pytest.raises(InvalidContainmentModeError):
        codec.from_json({"type": "n", "contain": "≤", "text": "x"})


def test_loads_rejects_invalid_json():
    with pytest.raises(FilterDeserializationError):
        codec.loads("{not json")
