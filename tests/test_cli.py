import json

import pytest

from fewsats_l402 import FewsatsClient, HTTPStatusError
from fewsats_l402 import cli


@pytest.fixture
def fake_client(monkeypatch, transport):
    created = {}

    def _create_client(*, config):
        created["client"] = FewsatsClient(config, transport=transport)
        return created["client"]

    monkeypatch.setattr(cli, "create_client", _create_client)
    return created


def _run(tmp_path, *argv):
    return cli.run_cli(
        ["--env-file", str(tmp_path / "none.env"), "--set", "FEWSATS_API_KEY=cli-key", *argv]
    )


def test_missing_key_exits_with_error(tmp_path, monkeypatch):
    monkeypatch.delenv("FEWSATS_API_KEY", raising=False)
    assert cli.run_cli(["--env-file", str(tmp_path / "none.env"), "me"]) == 1


def test_status_prints_client_format(tmp_path, capsys, fake_client, transport):
    transport.add(
        "GET",
        "/v0/l402/payment-status",
        {"status": "paid", "payment_context_token": "ctx", "offer_id": "o1"},
    )

    assert _run(tmp_path, "status", "ctx") == 0

    printed = json.loads(capsys.readouterr().out)
    assert printed == {"status": "paid", "paymentContextToken": "ctx", "offerId": "o1"}
    assert transport.closed


def test_create_offer_then_pay_from_saved_bundle(
    tmp_path, capsys, fake_client, transport, bundle_wire, payment_wire
):
    bundle_file = tmp_path / "bundle.json"
    transport.add("POST", "/v0/l402/offers", bundle_wire)
    transport.add("POST", "/v0/l402/purchases/from-offer", payment_wire)

    assert (
        _run(
            tmp_path,
            "create-offer",
            "--offer-id",
            "o1",
            "--amount",
            "1",
            "--title",
            "One Cent Offer",
            "--description",
            "A simple 1 cent offer for testing",
            "--payment-method",
            "lightning",
            "--save",
            str(bundle_file),
        )
        == 0
    )
    assert json.loads(bundle_file.read_text(encoding="utf-8")) == bundle_wire
    capsys.readouterr()

    assert _run(tmp_path, "pay-offer", "o1", "--bundle-file", str(bundle_file)) == 0

    printed = json.loads(capsys.readouterr().out)
    assert printed["id"] == 42
    assert printed["type"] == "one-off"
    assert transport.calls[-1].body["offer_id"] == "o1"


def test_balance_prints_list(tmp_path, capsys, fake_client, transport):
    transport.add("GET", "/v0/wallets", [{"currency": "USD", "balance": 5}])

    assert _run(tmp_path, "balance") == 0

    assert json.loads(capsys.readouterr().out) == [{"currency": "USD", "balance": 5}]


def test_api_failure_exits_with_error(tmp_path, fake_client, transport):
    transport.add(
        "GET",
        "/v0/l402/outgoing-payments/99",
        HTTPStatusError(404, "https://api.fewsats.com/v0/l402/outgoing-payments/99"),
    )

    assert _run(tmp_path, "payment-info", "99") == 1


def test_override_syntax_is_validated(tmp_path):
    with pytest.raises(SystemExit):
        cli.run_cli(["--set", "no-equals-sign", "me"])
