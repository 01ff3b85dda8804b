"""Concrete filter leaves, one per kind of card attribute."""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping
from functools import lru_cache
from typing import Any

from cards.attributes import CombatStat, Legality, ManaType, Rarity, sort_colors
from cards.card import normalize_text
from cards.mana import ManaCost
from filters.attributes import CardAttribute, ValueKind
from filters.containment import Comparison, Containment
from filters.errors import InvalidContainmentModeError
from filters.filter import ContainmentLeaf, FilterLeaf
from filters.grammar import join_options, split_options

_WORDS = re.compile(r'"([^"]*)"|(\S+)')
MULTICOLORED = "M"


def split_words(text: str) -> list[str]:
    """Split a query into normalized words, keeping double-quoted phrases together."""
    words = []
    for phrase, word in _WORDS.findall(text):
        token = normalize_text((phrase or word).strip())
        if token:
            words.append(token)
    return words


@lru_cache(maxsize=512)
def _word_pattern(word: str) -> re.Pattern:
    return re.compile(r"(?<!\w)" + re.escape(word) + r"(?!\w)")


@lru_cache(maxsize=128)
def _regex(pattern: str) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE)


def format_number(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _quoted(text: str, quote: str) -> str | None:
    if len(text) >= 2 and text[0] == quote and text[-1] == quote:
        return text[1:-1]
    return None


# ============= Text =============


class TextFilter(ContainmentLeaf):
    """
    Filter by a free-text attribute such as name, rules text or artist.

    The operand is a list of words (double-quoted phrases count as one word)
    matched on word boundaries, ignoring case and accents. With ``regex`` set
    the operand is a single regular expression instead; "exactly" then
    requires the whole text to match.
    """

    kinds = (ValueKind.TEXT, ValueKind.TYPE_LINE)

    def __init__(
        self,
        attribute: CardAttribute = CardAttribute.NAME,
        contain: Containment = Containment.ANY_OF,
        text: str = "",
        regex: bool = False,
    ):
        super().__init__(attribute, contain)
        self.text = text
        self.regex = regex

    def test(self, value: str) -> bool:
        if self.regex:
            pattern = self._pattern()
            if self.contain in (Containment.EXACTLY, Containment.NOT_EXACTLY):
                hit = pattern.fullmatch(value) is not None
                return hit if self.contain is Containment.EXACTLY else not hit
            hit = pattern.search(value) is not None
            return hit if self.contain in (Containment.ANY_OF, Containment.ALL_OF) else not hit
        if self.contain in (Containment.EXACTLY, Containment.NOT_EXACTLY):
            same = value == normalize_text(self.text.strip())
            return same if self.contain is Containment.EXACTLY else not same
        words = split_words(self.text)
        found = sum(1 for word in words if _word_pattern(word).search(value))
        return self.contain.test_found(found, len(words))

    def _pattern(self) -> re.Pattern:
        try:
            return _regex(self.text)
        except re.error as exc:
            raise self.invalid(self.text, str(exc)) from exc

    def content(self) -> str:
        delimiter = "/" if self.regex else '"'
        return f"{self.contain.value}{delimiter}{self.text}{delimiter}"

    def parse_content(self, body: str) -> None:
        contain, rest = self.split_contain(body)
        rest = rest.strip()
        quoted = _quoted(rest, '"')
        if quoted is not None:
            regex = False
        else:
            quoted = _quoted(rest, "/")
            if quoted is None:
                raise self.invalid(rest, 'expected "text" or /regex/')
            regex = True
        self.contain = contain
        self.text = quoted
        self.regex = regex
        if regex:
            self._pattern()

    def _fields(self) -> dict[str, Any]:
        return {"contain": self.contain.value, "text": self.text, "regex": self.regex}

    def _load_fields(self, fields: Mapping[str, Any]) -> None:
        self.load_contain(fields)
        self.text = str(fields["text"])
        self.regex = bool(fields.get("regex", False))
        if self.regex:
            self._pattern()

    def _key(self) -> tuple:
        return (self.attribute, self.contain, self.text, self.regex)


class TypeLineFilter(TextFilter):
    """Text filter over whole type lines, so "elf" does not match "Elemental"."""

    kinds = (ValueKind.TYPE_LINE,)

    def __init__(
        self,
        attribute: CardAttribute = CardAttribute.TYPE_LINE,
        contain: Containment = Containment.ANY_OF,
        text: str = "",
        regex: bool = False,
    ):
        super().__init__(attribute, contain, text, regex)


# ============= Mana and colors =============


class ManaCostFilter(ContainmentLeaf):
    """Compare the symbols of each face's mana cost with a cost, counting duplicates."""

    kinds = (ValueKind.MANA_COST,)

    def __init__(
        self,
        attribute: CardAttribute = CardAttribute.MANA_COST,
        contain: Containment = Containment.ALL_OF,
        cost: ManaCost | str = ManaCost(),
    ):
        super().__init__(attribute, contain)
        self.cost = cost if isinstance(cost, ManaCost) else ManaCost.parse(cost)

    def test(self, value: ManaCost) -> bool:
        return self.contain.test(value.symbols, self.cost.symbols)

    def content(self) -> str:
        return f"{self.contain.value}{self.cost}"

    def parse_content(self, body: str) -> None:
        contain, rest = self.split_contain(body)
        try:
            cost = ManaCost.parse(rest)
        except ValueError as exc:
            raise self.invalid(rest, str(exc)) from exc
        self.contain = contain
        self.cost = cost

    def _fields(self) -> dict[str, Any]:
        return {"contain": self.contain.value, "cost": str(self.cost)}

    def _load_fields(self, fields: Mapping[str, Any]) -> None:
        self.load_contain(fields)
        try:
            self.cost = ManaCost.parse(str(fields["cost"]))
        except ValueError as exc:
            raise self.invalid(str(fields["cost"]), str(exc)) from exc

    def _key(self) -> tuple:
        return (self.attribute, self.contain, self.cost)


class ColorFilter(ContainmentLeaf):
    """Filter by color or color identity, optionally requiring more than one color."""

    kinds = (ValueKind.COLORS,)

    def __init__(
        self,
        attribute: CardAttribute = CardAttribute.COLOR,
        contain: Containment = Containment.ANY_OF,
        colors: Iterable[ManaType] = (),
        multicolored: bool = False,
    ):
        super().__init__(attribute, contain)
        self.colors: set[ManaType] = set(colors)
        self.multicolored = multicolored

    def test(self, value: tuple[ManaType, ...]) -> bool:
        if self.multicolored and len(value) < 2:
            return False
        return self.contain.test(value, self.colors)

    def _codes(self) -> str:
        codes = "".join(color.value for color in sort_colors(self.colors))
        return codes + (MULTICOLORED if self.multicolored else "")

    def _parse_codes(self, codes: str) -> tuple[set[ManaType], bool]:
        colors: set[ManaType] = set()
        multicolored = False
        for ch in codes:
            if ch.upper() == MULTICOLORED:
                multicolored = True
                continue
            try:
                colors.add(ManaType.parse(ch))
            except ValueError as exc:
                raise self.invalid(codes, str(exc)) from exc
        return colors, multicolored

    def content(self) -> str:
        return f'{self.contain.value}"{self._codes()}"'

    def parse_content(self, body: str) -> None:
        contain, rest = self.split_contain(body)
        codes = _quoted(rest.strip(), '"')
        if codes is None:
            raise self.invalid(rest, 'expected "WUBRG"')
        self.colors, self.multicolored = self._parse_codes(codes)
        self.contain = contain

    def _fields(self) -> dict[str, Any]:
        return {
            "contain": self.contain.value,
            "colors": [color.value for color in sort_colors(self.colors)],
            "multicolored": self.multicolored,
        }

    def _load_fields(self, fields: Mapping[str, Any]) -> None:
        self.load_contain(fields)
        colors, _ = self._parse_codes("".join(str(code) for code in fields["colors"]))
        self.colors = colors
        self.multicolored = bool(fields.get("multicolored", False))

    def _key(self) -> tuple:
        return (self.attribute, self.contain, frozenset(self.colors), self.multicolored)


# ============= Numbers =============


class NumberFilter(FilterLeaf):
    """Compare a numeric attribute with a constant; absent values never match."""

    kinds = (ValueKind.NUMBER,)

    def __init__(
        self,
        attribute: CardAttribute = CardAttribute.MANA_VALUE,
        operation: Comparison = Comparison.EQ,
        operand: float = 0.0,
    ):
        super().__init__(attribute)
        self.operation = operation
        self.operand = operand

    @property
    def operation(self) -> Comparison:
        return self._operation

    @operation.setter
    def operation(self, value: Comparison) -> None:
        self.check_mode(value)
        self._operation = value

    @property
    def operand(self) -> float:
        return self._operand

    @operand.setter
    def operand(self, value: float) -> None:
        number = float(value)
        if math.isnan(number):
            raise self.invalid(str(value), "not a number")
        self._operand = number

    def test(self, value: float | None) -> bool:
        return value is not None and self.operation.test(value, self.operand)

    def content(self) -> str:
        return f"{self.operation.value}{format_number(self.operand)}"

    def parse_content(self, body: str) -> None:
        try:
            operation, rest = Comparison.split_prefix(body)
        except ValueError:
            raise InvalidContainmentModeError(self.code, body) from None
        self.operation = operation
        self.operand = self._parse_number(rest.strip())

    def _parse_number(self, text: str) -> float:
        try:
            return float(text)
        except ValueError:
            raise self.invalid(text, "expected a number") from None

    def _fields(self) -> dict[str, Any]:
        return {"operation": self.operation.value, "operand": self.operand}

    def _load_fields(self, fields: Mapping[str, Any]) -> None:
        try:
            operation = Comparison.parse(str(fields["operation"]))
        except ValueError:
            raise InvalidContainmentModeError(self.code, fields["operation"]) from None
        self.operation = operation
        self.operand = self._parse_number(str(fields["operand"]))

    def _key(self) -> tuple:
        return (self.attribute, self.operation, self.operand)


class VariableNumberFilter(NumberFilter):
    """
    Number filter for power, toughness and loyalty.

    With ``varies`` set it matches faces whose stat is variable (``*``, ``X``)
    and ignores the comparison.
    """

    kinds = (ValueKind.VARIABLE_NUMBER,)
    VARIES = "*"

    def __init__(
        self,
        attribute: CardAttribute = CardAttribute.POWER,
        operation: Comparison = Comparison.EQ,
        operand: float = 0.0,
        varies: bool = False,
    ):
        super().__init__(attribute, operation, operand)
        self.varies = varies

    def test(self, value: CombatStat) -> bool:
        if self.varies:
            return value.variable
        return super().test(value.value)

    def content(self) -> str:
        return self.VARIES if self.varies else super().content()

    def parse_content(self, body: str) -> None:
        if body.strip() == self.VARIES:
            self.varies = True
            return
        super().parse_content(body)
        self.varies = False

    def _fields(self) -> dict[str, Any]:
        return {**super()._fields(), "varies": self.varies}

    def _load_fields(self, fields: Mapping[str, Any]) -> None:
        super()._load_fields(fields)
        self.varies = bool(fields.get("varies", False))

    def _key(self) -> tuple:
        if self.varies:
            return (self.attribute, True)
        return (*super()._key(), False)


# ============= Options =============


def _clean_options(options: Iterable[Any]) -> set[Any]:
    """Strip text options and drop blank ones, as the filter string form does."""
    cleaned = set()
    for option in options:
        if isinstance(option, str):
            option = option.strip()
            if not option:
                continue
        cleaned.add(option)
    return cleaned


class OptionsFilter(ContainmentLeaf):
    """Filter a multi-valued attribute (supertypes, types, subtypes) against a set of options."""

    kinds = (ValueKind.MULTI_OPTIONS, ValueKind.SINGLETON_OPTIONS, ValueKind.LEGALITY)

    def __init__(
        self,
        attribute: CardAttribute = CardAttribute.CARD_TYPE,
        contain: Containment = Containment.ANY_OF,
        selected: Iterable[Any] = (),
    ):
        super().__init__(attribute, contain)
        self.selected = _clean_options(selected)

    def to_option_string(self, option: Any) -> str:
        return str(option)

    def from_option_string(self, text: str) -> Any:
        return text

    def fold(self, option: Any) -> Any:
        return option.casefold() if isinstance(option, str) else option

    def option_strings(self) -> list[str]:
        return sorted(self.to_option_string(option) for option in _clean_options(self.selected))

    def test(self, value: Iterable[Any]) -> bool:
        return self.contain.test(
            {self.fold(item) for item in value},
            {self.fold(option) for option in _clean_options(self.selected)},
        )

    def content(self) -> str:
        return f"{self.contain.value}{{{join_options(self.option_strings())}}}"

    def parse_content(self, body: str) -> None:
        contain, rest = self.split_contain(body)
        rest = rest.strip()
        if not (rest.startswith("{") and rest.endswith("}")):
            raise self.invalid(rest, "expected {option,option}")
        self.selected = self._parse_options(rest[1:-1])
        self.contain = contain

    def _parse_options(self, text: str) -> set[Any]:
        try:
            return {self.from_option_string(option) for option in split_options(text)}
        except ValueError as exc:
            raise self.invalid(text, str(exc)) from exc

    def _fields(self) -> dict[str, Any]:
        return {"contain": self.contain.value, "selected": self.option_strings()}

    def _load_fields(self, fields: Mapping[str, Any]) -> None:
        self.load_contain(fields)
        raw = fields["selected"]
        if isinstance(raw, str) or not isinstance(raw, Iterable):
            raise TypeError("selected must be a list")
        try:
            self.selected = _clean_options(self.from_option_string(str(option)) for option in raw)
        except ValueError as exc:
            raise self.invalid(str(raw), str(exc)) from exc

    def _key(self) -> tuple:
        return (self.attribute, self.contain, frozenset(_clean_options(self.selected)))


class SingletonOptionsFilter(OptionsFilter):
    """Options filter for attributes with exactly one value per card (expansion, block)."""

    kinds = (ValueKind.SINGLETON_OPTIONS,)

    def __init__(
        self,
        attribute: CardAttribute = CardAttribute.EXPANSION,
        contain: Containment = Containment.ANY_OF,
        selected: Iterable[Any] = (),
    ):
        super().__init__(attribute, contain, selected)

    def test(self, value: Any) -> bool:
        return super().test((value,))


class RarityFilter(SingletonOptionsFilter):
    def __init__(
        self,
        attribute: CardAttribute = CardAttribute.RARITY,
        contain: Containment = Containment.ANY_OF,
        selected: Iterable[Rarity] = (),
    ):
        super().__init__(attribute, contain, selected)

    def to_option_string(self, option: Rarity) -> str:
        return option.value

    def from_option_string(self, text: str) -> Rarity:
        return Rarity.parse(text)


class LegalityFilter(OptionsFilter):
    """
    Filter by the formats a card is legal in.

    With ``restricted`` set only formats where the card is restricted count.
    The string form ends with ``r`` or ``u`` after the option list.
    """

    kinds = (ValueKind.LEGALITY,)
    RESTRICTED = "r"
    UNRESTRICTED = "u"

    def __init__(
        self,
        attribute: CardAttribute = CardAttribute.FORMAT_LEGALITY,
        contain: Containment = Containment.ANY_OF,
        selected: Iterable[str] = (),
        restricted: bool = False,
    ):
        super().__init__(attribute, contain, selected)
        self.restricted = restricted

    def fold(self, option: str) -> str:
        return option.lower()

    def test(self, value: Mapping[str, Legality]) -> bool:
        if self.restricted:
            formats = [name for name, legality in value.items() if legality is Legality.RESTRICTED]
        else:
            formats = [name for name, legality in value.items() if legality.is_legal]
        return super().test(formats)

    def content(self) -> str:
        flag = self.RESTRICTED if self.restricted else self.UNRESTRICTED
        return super().content() + flag

    def parse_content(self, body: str) -> None:
        stripped = body.rstrip()
        flag = stripped[-1:].lower()
        if flag not in (self.RESTRICTED, self.UNRESTRICTED):
            raise self.invalid(body, "expected r or u after the format list")
        super().parse_content(stripped[:-1])
        self.restricted = flag == self.RESTRICTED

    def _fields(self) -> dict[str, Any]:
        return {**super()._fields(), "restricted": self.restricted}

    def _load_fields(self, fields: Mapping[str, Any]) -> None:
        super()._load_fields(fields)
        self.restricted = bool(fields.get("restricted", False))

    def _key(self) -> tuple:
        return (*super()._key(), self.restricted)


# ============= Binary =============


class BinaryFilter(FilterLeaf):
    """Matches every card (``<*>``) or no card (``<0>``)."""

    kinds = (ValueKind.BINARY,)

    def __init__(self, attribute: CardAttribute = CardAttribute.ANY):
        super().__init__(attribute)

    def test(self, value: bool) -> bool:
        return value

    def content(self) -> str:
        return ""

    def parse_content(self, body: str) -> None:
        if body.strip():
            raise self.invalid(body, "takes no operand")

    def _fields(self) -> dict[str, Any]:
        return {}

    def _load_fields(self, fields: Mapping[str, Any]) -> None:
        pass

    def _key(self) -> tuple:
        return (self.attribute,)
