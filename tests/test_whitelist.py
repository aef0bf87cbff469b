"""Tests for field-name validation and resource whitelists."""

import pytest

from lims.constants import SQL_RESERVED_WORDS
from lims.pagination.exceptions import FieldErrorReason, FieldValidationError
from lims.pagination.whitelist import (
    BATCH_FIELDS,
    EQUIPMENT_FIELDS,
    REAGENT_FIELDS,
    REPORT_FIELDS,
    RESOURCE_WHITELISTS,
    FieldConfig,
    FieldWhitelist,
    is_safe_field_name,
    validate_field_name,
)


def _reason(name: str, config: FieldConfig = FieldConfig()) -> FieldErrorReason:
    with pytest.raises(FieldValidationError) as exc_info:
        validate_field_name(name, config)
    return exc_info.value.reason


class TestValidateFieldName:
    """Tests for validate_field_name."""

    @pytest.mark.parametrize("name", ["name", "total_quantity", "cas_number", "type_", "x1"])
    def test_accepts_plain_identifiers(self, name: str):
        """Test ordinary column names pass."""
        validate_field_name(name)
        assert is_safe_field_name(name)

    def test_empty(self):
        """Test empty names are rejected first."""
        assert _reason("") is FieldErrorReason.EMPTY

    def test_too_short(self):
        """Test strict config enforces a two-character minimum."""
        assert _reason("a", FieldConfig.strict()) is FieldErrorReason.TOO_SHORT

    def test_too_long(self):
        """Test names over the maximum length are rejected."""
        assert _reason("a" * 65) is FieldErrorReason.TOO_LONG
        assert _reason("a" * 33, FieldConfig.strict()) is FieldErrorReason.TOO_LONG

    @pytest.mark.parametrize("name", ["1name", "_name", "-name", "éname"])
    def test_invalid_start(self, name: str):
        """Test names must start with an ASCII letter."""
        assert _reason(name) is FieldErrorReason.INVALID_START

    def test_leading_underscore_when_allowed(self):
        """Test the leading underscore option."""
        config = FieldConfig().with_options(allow_leading_underscore=True)

        validate_field_name("_private", config)

    @pytest.mark.parametrize(
        "name",
        ["name; DROP TABLE reagents", "name--", "na me", "name'", "r.name", "nàme", "col[0]"],
    )
    def test_invalid_character(self, name: str):
        """Test injection-shaped names are rejected."""
        assert _reason(name) is FieldErrorReason.INVALID_CHARACTER

    def test_consecutive_underscores(self):
        """Test double underscores are rejected."""
        assert _reason("total__quantity") is FieldErrorReason.CONSECUTIVE_UNDERSCORES

    @pytest.mark.parametrize("name", ["select", "DROP", "Order", "table"])
    def test_reserved_words(self, name: str):
        """Test reserved words are rejected in any case."""
        assert _reason(name) is FieldErrorReason.RESERVED_WORD

    @pytest.mark.parametrize("word", sorted(SQL_RESERVED_WORDS))
    def test_every_reserved_word_is_disallowed(self, word: str):
        """Test no reserved word passes a whitelist, even as a member."""
        lowered = word.lower()

        assert not FieldWhitelist([lowered]).is_allowed(lowered)
        assert not FieldWhitelist([word]).is_allowed(word)

    def test_qualified_names_with_dot_config(self):
        """Test alias.column is accepted only when dots are allowed."""
        config = FieldConfig.for_reports()

        validate_field_name("b.batch_number", config)
        assert _reason("b.batch_number") is FieldErrorReason.INVALID_CHARACTER

    @pytest.mark.parametrize("name", ["a.b.c", "b.", "b..c"])
    def test_bad_dot_format(self, name: str):
        """Test more than one dot or empty segments."""
        assert _reason(name, FieldConfig.for_reports()) is FieldErrorReason.INVALID_FORMAT

    def test_reserved_segment(self):
        """Test each dotted segment is checked against reserved words."""
        assert _reason("b.select", FieldConfig.for_reports()) is FieldErrorReason.RESERVED_WORD

    def test_brackets(self):
        """Test bracket option accepts one balanced pair."""
        config = FieldConfig().with_options(allow_brackets=True)

        validate_field_name("col[0]", config)
        assert _reason("col]0[", config) is FieldErrorReason.INVALID_FORMAT
        assert _reason("col[0", config) is FieldErrorReason.INVALID_FORMAT
        assert _reason("c[0][1]", config) is FieldErrorReason.INVALID_FORMAT

    def test_error_carries_field(self):
        """Test the error names the offending field."""
        with pytest.raises(FieldValidationError) as exc_info:
            validate_field_name("drop")

        assert exc_info.value.field == "drop"
        assert "Reserved SQL word" in str(exc_info.value)


class TestFieldWhitelist:
    """Tests for FieldWhitelist."""

    def test_membership_is_exact(self):
        """Test only listed names are allowed."""
        whitelist = FieldWhitelist(["name", "status"])

        assert whitelist.is_allowed("name")
        assert not whitelist.is_allowed("Name")
        assert not whitelist.is_allowed("formula")
        assert "status" in whitelist
        assert 42 not in whitelist

    def test_validate_not_in_whitelist(self):
        """Test well-formed but unknown names are rejected."""
        whitelist = FieldWhitelist(["name"])

        with pytest.raises(FieldValidationError) as exc_info:
            whitelist.validate("formula")

        assert exc_info.value.reason is FieldErrorReason.NOT_IN_WHITELIST
        assert str(exc_info.value) == "Field 'formula' not in whitelist"

    def test_validate_prefixes_syntax_errors(self):
        """Test syntax errors mention the field name."""
        whitelist = FieldWhitelist(["name"])

        with pytest.raises(FieldValidationError) as exc_info:
            whitelist.validate("na me")

        assert exc_info.value.reason is FieldErrorReason.INVALID_CHARACTER
        assert str(exc_info.value).startswith("Field 'na me': ")

    def test_malformed_member_still_rejected(self):
        """Test a listed name that breaks the syntax rules is not allowed."""
        whitelist = FieldWhitelist(["select"])

        assert not whitelist.is_allowed("select")

    def test_filter_fields_preserves_order(self):
        """Test filter_fields drops unknowns and keeps order."""
        whitelist = FieldWhitelist(["a1", "b1", "c1"])

        assert whitelist.filter_fields(["c1", "x1", "a1", "drop"]) == ["c1", "a1"]

    def test_add_and_remove(self):
        """Test copy-on-write mutation."""
        whitelist = FieldWhitelist(["name"])
        before = whitelist.allowed_fields

        whitelist.add_field("formula")
        whitelist.remove_field("name")

        assert whitelist.allowed_fields == frozenset({"formula"})
        assert before == frozenset({"name"})


class TestResourceWhitelists:
    """Tests for the per-resource whitelists."""

    def test_every_member_is_well_formed(self):
        """Test no resource lists a name its own config rejects."""
        for resource, whitelist in RESOURCE_WHITELISTS.items():
            for name in whitelist.allowed_fields:
                assert whitelist.is_allowed(name), f"{resource}: {name}"

    def test_reagent_fields(self):
        """Test reagent columns used by listings are present."""
        for name in ("total_quantity", "batches_count", "created_at", "deleted_at"):
            assert name in REAGENT_FIELDS

    def test_batch_fields(self):
        """Test batch columns used by listings are present."""
        for name in ("quantity", "status", "supplier", "reagent_id"):
            assert name in BATCH_FIELDS

    def test_equipment_type_column(self):
        """Test the underscore-suffixed column is accepted."""
        assert "type_" in EQUIPMENT_FIELDS
        assert "type" not in EQUIPMENT_FIELDS

    def test_report_qualified_columns(self):
        """Test report whitelist accepts aliased columns."""
        assert "b.batch_number" in REPORT_FIELDS
        assert "r.name" in REPORT_FIELDS
        assert "x.name" not in REPORT_FIELDS
