"""
Tests for application wiring and the CLI entry point.
"""

import os
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from conftest import TEST_SECRET, make_config
from starlette.applications import Starlette

from cc_wrapper_auth import create_app, main
from cc_wrapper_auth.auth.middleware import extract_bearer_token
from cc_wrapper_auth.errors import ConfigurationError


class TestCreateApp:
    def test_returns_starlette_app(self):
        assert isinstance(create_app(make_config()), Starlette)

    def test_reads_environment_when_no_config(self):
        with patch.dict(os.environ, {"JWT_SECRET": TEST_SECRET}, clear=True):
            assert isinstance(create_app(), Starlette)

    def test_refuses_missing_secret(self):
        with pytest.raises(ConfigurationError):
            create_app(make_config(jwt_secret=""))

    def test_refuses_bad_expiry(self):
        with pytest.raises(ConfigurationError):
            create_app(make_config(jwt_expiry="forever"))


class TestMain:
    def test_exits_without_secret(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(SystemExit) as exc_info:
                main()
        assert exc_info.value.code == 1

    def test_runs_uvicorn(self):
        env = {"JWT_SECRET": TEST_SECRET, "AUTH_HTTP_HOST": "0.0.0.0", "AUTH_HTTP_PORT": "9000"}
        server = MagicMock()

        with patch.dict(os.environ, env, clear=True), patch(
            "uvicorn.Server", return_value=server
        ) as server_cls, patch("uvicorn.Config") as config_cls:
            main()

        kwargs = config_cls.call_args.kwargs
        assert kwargs["host"] == "0.0.0.0"
        assert kwargs["port"] == 9000
        server_cls.assert_called_once_with(config_cls.return_value)
        server.run.assert_called_once()


class TestExtractBearerToken:
    @pytest.mark.parametrize(
        "header,expected",
        [
            ("Bearer abc.def.ghi", "abc.def.ghi"),
            ("Bearer ", None),
            ("bearer abc", None),
            ("Basic dXNlcjpwYXNz", None),
            (None, None),
        ],
    )
    def test_extract(self, header, expected):
        headers = {"authorization": header} if header is not None else {}
        assert extract_bearer_token(SimpleNamespace(headers=headers)) == expected
