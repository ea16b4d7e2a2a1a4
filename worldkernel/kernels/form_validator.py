"""
Kernel form validation.

Pure functions: normalize raw user input and reject what cannot be stored.
Rules run in a fixed order and the first failure wins, so the message a
user sees is deterministic.
"""

from typing import Iterable, List, Union

from pydantic import BaseModel

from worldkernel.core.models.kernel import (
    DESCRIPTION_MAX_LENGTH,
    KernelLicense,
    MAX_TAGS,
    TAG_MAX_LENGTH,
    TITLE_MAX_LENGTH,
)
from worldkernel.errors import ValidationError

ALLOWED_LICENSES = tuple(item.value for item in KernelLicense)


class KernelFormData(BaseModel):
    """Normalized kernel fields, ready for the repository."""

    title: str
    description: str
    tags: List[str]
    license: str


def normalize_tags(raw_tags: Iterable[str]) -> List[str]:
    """Trim and lowercase each tag, dropping empties. Duplicates are kept."""
    tags = []
    for tag in raw_tags:
        tag = tag.strip().lower()
        if tag:
            tags.append(tag)
    return tags


def parse_tags_input(tags_input: str) -> List[str]:
    """Split a comma-separated tag field; entries past the tenth are dropped."""
    return normalize_tags(tags_input.split(","))[:MAX_TAGS]


def _check_title(title: str) -> None:
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(
            f"Title must be {TITLE_MAX_LENGTH} characters or less",
            field="title",
        )


def _check_description(description: str) -> None:
    if len(description) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(
            f"Description must be {DESCRIPTION_MAX_LENGTH} characters or less",
            field="description",
        )


def _check_tag_lengths(tags: List[str]) -> None:
    for tag in tags:
        if len(tag) > TAG_MAX_LENGTH:
            raise ValidationError(
                f'Tag "{tag}" is too long (max {TAG_MAX_LENGTH} characters)',
                field="tags",
            )


def _check_license(license: Union[str, KernelLicense]) -> str:
    value = license.value if isinstance(license, KernelLicense) else license
    if value not in ALLOWED_LICENSES:
        raise ValidationError(
            f"License must be one of: {', '.join(ALLOWED_LICENSES)}",
            field="license",
        )
    return value


def validate_kernel_form(
    title: str,
    description: str,
    tags_input: str,
    license: Union[str, KernelLicense] = KernelLicense.OPEN,
) -> KernelFormData:
    """
    Validate a submitted kernel form.

    Args:
        title: Raw title, at most 200 characters
        description: Raw description, at most 5000 characters
        tags_input: Comma-separated tags
        license: One of open, attribution, permission

    Returns:
        KernelFormData with tags split, trimmed, lowercased and capped at 10

    Raises:
        ValidationError: On the first rule that fails
    """
    _check_title(title)
    _check_description(description)
    tags = parse_tags_input(tags_input)
    _check_tag_lengths(tags)
    license_value = _check_license(license)

    return KernelFormData(
        title=title,
        description=description,
        tags=tags,
        license=license_value,
    )


def validate_kernel_fields(
    title: str,
    description: str,
    tags: Iterable[str],
    license: Union[str, KernelLicense] = KernelLicense.OPEN,
) -> KernelFormData:
    """
    Validate already-split fields at the repository boundary.

    Unlike the form, an over-long tag list is rejected rather than truncated:
    callers below the form are expected to hand over at most 10 tags.
    """
    _check_title(title)
    _check_description(description)
    normalized = normalize_tags(tags)
    if len(normalized) > MAX_TAGS:
        raise ValidationError(
            f"A kernel may have at most {MAX_TAGS} tags",
            field="tags",
        )
    _check_tag_lengths(normalized)
    license_value = _check_license(license)

    return KernelFormData(
        title=title,
        description=description,
        tags=normalized,
        license=license_value,
    )
