"""Unit tests for kernel form validation."""

import pytest

from worldkernel.errors import ValidationError
from worldkernel.kernels.form_validator import (
    normalize_tags,
    parse_tags_input,
    validate_kernel_fields,
    validate_kernel_form,
)


class TestTagParsing:
    """Tests for splitting and normalizing the tag field."""

    def test_trims_lowercases_and_drops_empties(self):
        """Duplicates survive normalization."""
        tags = parse_tags_input("Fantasy, magic-system, , Fantasy")
        assert tags == ["fantasy", "magic-system", "fantasy"]

    def test_empty_input(self):
        assert parse_tags_input("") == []
        assert parse_tags_input(" ,  , ") == []

    def test_truncates_to_ten(self):
        tags = parse_tags_input(",".join(f"t{i}" for i in range(15)))
        assert tags == [f"t{i}" for i in range(10)]

    def test_normalize_keeps_order(self):
        assert normalize_tags(["  B ", "a", ""]) == ["b", "a"]


class TestValidateKernelForm:
    """Tests for validate_kernel_form."""

    def test_valid_form(self):
        data = validate_kernel_form(
            title="The Drowned Library",
            description="A city where books float.",
            tags_input="Fantasy, Cities",
            license="attribution",
        )

        assert data.title == "The Drowned Library"
        assert data.tags == ["fantasy", "cities"]
        assert data.license == "attribution"

    def test_default_license_is_open(self):
        data = validate_kernel_form("T", "D", "")
        assert data.license == "open"

    def test_title_boundary(self):
        validate_kernel_form("x" * 200, "D", "")

        with pytest.raises(ValidationError) as exc_info:
            validate_kernel_form("x" * 201, "D", "")

        assert exc_info.value.message == "Title must be 200 characters or less"
        assert exc_info.value.field == "title"

    def test_description_boundary(self):
        validate_kernel_form("T", "x" * 5000, "")

        with pytest.raises(ValidationError) as exc_info:
            validate_kernel_form("T", "x" * 5001, "")

        assert exc_info.value.message == "Description must be 5000 characters or less"

    def test_long_tag_names_the_tag(self):
        long_tag = "a" * 31

        with pytest.raises(ValidationError) as exc_info:
            validate_kernel_form("T", "D", f"ok, {long_tag}")

        assert exc_info.value.message == f'Tag "{long_tag}" is too long (max 30 characters)'
        assert exc_info.value.field == "tags"

    def test_tag_of_thirty_is_accepted(self):
        data = validate_kernel_form("T", "D", "b" * 30)
        assert data.tags == ["b" * 30]

    def test_unknown_license(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_kernel_form("T", "D", "", license="gpl")

        assert exc_info.value.field == "license"
        assert "open, attribution, permission" in exc_info.value.message

    def test_first_failing_rule_wins(self):
        """Title is checked before description."""
        with pytest.raises(ValidationError) as exc_info:
            validate_kernel_form("x" * 201, "x" * 5001, "", license="gpl")

        assert exc_info.value.field == "title"


class TestValidateKernelFields:
    """Tests for the repository-level check."""

    def test_rejects_more_than_ten_tags(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_kernel_fields("T", "D", [f"t{i}" for i in range(11)], "open")

        assert exc_info.value.message == "A kernel may have at most 10 tags"

    def test_normalizes_tags(self):
        data = validate_kernel_fields("T", "D", [" Sea ", "sea"], "permission")
        assert data.tags == ["sea", "sea"]
