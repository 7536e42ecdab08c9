from __future__ import annotations

import decimal

import click
import pytest

import gradeflow.lib.cli as gcli
from gradeflow.model import AttemptID, ScorePolicy


class TestKeyParamType(object):
    def test_prefixed_and_bare_keys(self) -> None:
        param = gcli.KeyParamType(AttemptID)
        key = AttemptID()

        assert param.convert(str(key), None, None) == key
        assert param.convert(key.key, None, None) == key
        assert param.convert(key, None, None) is key

    def test_invalid_key(self) -> None:
        with pytest.raises(click.BadParameter):
            gcli.KeyParamType(AttemptID).convert("nope", None, None)


class TestDecimalParamType(object):
    def test_convert(self) -> None:
        assert gcli.DecimalParamType().convert(" 7.5 ", None, None) == decimal.Decimal("7.5")

    def test_invalid(self) -> None:
        with pytest.raises(click.BadParameter):
            gcli.DecimalParamType().convert("seven", None, None)


class TestEnumType(object):
    def test_convert(self) -> None:
        param = gcli.EnumType(ScorePolicy)
        assert param.convert("reject", None, None) is ScorePolicy.Reject
        with pytest.raises(click.BadParameter):
            param.convert("lenient", None, None)


class TestURIParamType(object):
    def test_path_becomes_file_url(self, tmp_path) -> None:
        url = gcli.URIParamType(dir_ok=True).convert(str(tmp_path), None, None)
        assert url is not None
        assert url.scheme == "file"
        assert url.path == str(tmp_path)

    def test_directory_rejected(self, tmp_path) -> None:
        with pytest.raises(click.BadParameter):
            gcli.URIParamType().convert(str(tmp_path), None, None)

    def test_missing_path(self, tmp_path) -> None:
        with pytest.raises(click.BadParameter):
            gcli.URIParamType().convert(str(tmp_path / "missing"), None, None)
