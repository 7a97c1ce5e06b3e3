from __future__ import annotations

import string

import pytest

from pidock_core.config_types import DEFAULT_SECRET_ALPHABET
from pidock_core.credentials import (
    SecretSpec,
    generate_secret,
    materialize_secrets,
    parse_credentials,
    read_credentials,
)
from pidock_core.errors import GenerationFailure


def test_generate_secret_length_and_alphabet() -> None:
    value = generate_secret(24)
    assert len(value) == 24
    assert set(value) <= set(string.ascii_letters + string.digits)


def test_generate_secret_is_unique_enough() -> None:
    values = {generate_secret(16) for _ in range(1000)}
    assert len(values) == 1000


def test_generate_secret_custom_alphabet() -> None:
    assert set(generate_secret(50, "ab")) <= {"a", "b"}


@pytest.mark.parametrize("length, alphabet", [(0, DEFAULT_SECRET_ALPHABET), (-3, DEFAULT_SECRET_ALPHABET), (8, "")])
def test_generate_secret_rejects_bad_input(length, alphabet) -> None:
    with pytest.raises(GenerationFailure):
        generate_secret(length, alphabet)


def test_parse_credentials_skips_comments_and_keeps_equals() -> None:
    content = "# Service credentials\n# label\nTOKEN=a=b\n\nbroken line\n"
    assert parse_credentials(content) == {"TOKEN": "a=b"}


def test_materialize_secrets_only_fills_missing(tmp_path) -> None:
    path = tmp_path / "svc_credentials.txt"
    path.write_text("# Svc\nFIRST=keepme\n", encoding="utf-8")
    specs = (SecretSpec("FIRST", "first", 8), SecretSpec("SECOND", "second", 10))

    values = materialize_secrets(path, title="Svc", specs=specs, alphabet=DEFAULT_SECRET_ALPHABET, owner=None)

    assert values["FIRST"] == "keepme"
    assert len(values["SECOND"]) == 10
    assert read_credentials(path) == values


def test_materialize_secrets_leaves_complete_record_untouched(tmp_path) -> None:
    path = tmp_path / "svc_credentials.txt"
    path.write_text("FIRST=one\n", encoding="utf-8")

    materialize_secrets(path, title="Svc", specs=(SecretSpec("FIRST", "first"),), alphabet="x", owner=None)

    assert path.read_text(encoding="utf-8") == "FIRST=one\n"
