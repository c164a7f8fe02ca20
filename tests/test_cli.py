import json

import pytest

import voe.cli as cli
from voe.api.exceptions import ErrorKind, VoeError


class _FakeVoe:
    calls = []
    fail_with = None

    @classmethod
    def from_env(cls, config_path=None):
        cls.config_path = config_path
        return cls()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return None

    async def get_file_list(self, **params):
        _FakeVoe.calls.append(("get_file_list", params))
        if _FakeVoe.fail_with:
            raise _FakeVoe.fail_with
        return [{"file_code": "abc"}]

    async def get_file_info(self, codes):
        _FakeVoe.calls.append(("get_file_info", codes))
        return []


@pytest.fixture
def fake_voe(monkeypatch):
    _FakeVoe.calls = []
    _FakeVoe.fail_with = None
    monkeypatch.setattr(cli, "VoeClient", _FakeVoe)
    return _FakeVoe


def test_parser_maps_flags_to_params():
    args = cli.build_parser().parse_args(["file-list", "--page", "2", "--per-page", "5", "--folder-id", "3"])
    assert args.command == "file-list"
    assert cli._list_params(args) == {"page": 2, "per_page": 5, "fld_id": 3}


def test_file_list_preview_flag_is_forwarded(fake_voe):
    args = cli.build_parser().parse_args(["file-list", "--preview"])
    assert cli._list_params(args) == {"preview": True}

    assert cli.run(args) == 0
    assert fake_voe.calls == [("get_file_list", {"preview": True})]

    args = cli.build_parser().parse_args(["file-list"])
    assert "preview" not in cli._list_params(args)


def test_run_prints_result_json(fake_voe, capsys):
    args = cli.build_parser().parse_args(["--config", "voe.yaml", "file-list", "--page", "2"])

    assert cli.run(args) == 0

    out = capsys.readouterr().out
    assert json.loads(out) == [{"file_code": "abc"}]
    assert fake_voe.calls == [("get_file_list", {"page": 2})]
    assert fake_voe.config_path == "voe.yaml"


def test_file_info_accepts_many_codes(fake_voe):
    args = cli.build_parser().parse_args(["file-info", "a", "b"])
    assert cli.run(args) == 0
    assert fake_voe.calls == [("get_file_info", ["a", "b"])]


def test_errors_go_to_stderr_with_exit_code_1(fake_voe, capsys):
    fake_voe.fail_with = VoeError(ErrorKind.AUTHENTICATION, "Unauthorized request", status=401)
    args = cli.build_parser().parse_args(["file-list"])

    assert cli.run(args) == 1

    err = json.loads(capsys.readouterr().err)
    assert err["kind"] == "authentication"
    assert err["status"] == 401


def test_missing_subcommand_exits():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args([])
