import json
from dataclasses import dataclass

import yaml

from osdkit.output import print_response, render_response
from osdkit.servicelog_models import Message


@dataclass
class _Account:
    name: str
    ids: list

    def __str__(self):
        return f"account {self.name}"


DATA = {"name": "acct", "ids": ["a", "b"], "active": True}


def test_json_round_trip():
    assert json.loads(render_response("json", DATA)) == DATA


def test_json_uses_four_space_indent():
    text = render_response("json", {"name": "acct"})
    assert '\n    "name"' in text


def test_yaml_round_trip():
    assert yaml.safe_load(render_response("yaml", DATA)) == DATA


def test_yaml_keeps_key_order():
    text = render_response("yaml", {"zeta": 1, "alpha": 2})
    assert text.index("zeta") < text.index("alpha")


def test_text_uses_str():
    account = _Account(name="acct", ids=[])
    assert render_response("", account) == str(account)


def test_dataclass_rendered_as_fields():
    account = _Account(name="acct", ids=["x"])
    assert json.loads(render_response("json", account)) == {"name": "acct", "ids": ["x"]}


def test_to_dict_is_preferred():
    message = Message(severity="Info")
    assert json.loads(render_response("json", message)) == message.to_dict()


def test_print_response(capsys):
    print_response("json", DATA)
    out = capsys.readouterr().out
    assert out == render_response("json", DATA) + "\n"
    assert json.loads(out) == DATA