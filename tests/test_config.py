import pytest

from ctclm.config import ConfigError, deep_update, load_config
from ctclm.data.labels import LabelConfig
from ctclm.decoding.kenlm_scorer import KenLMBeamScorer
from ctclm.decoding.lm import LanguageModelLoadFailure


def _write(tmp_path, text):
    p = tmp_path / "scorer.yaml"
    p.write_text(text, encoding="utf-8")
    return p


def test_load_config_defaults(tmp_path):
    cfg = load_config(_write(tmp_path, "lm:\n  path: lm.arpa\n"))
    assert cfg.lm_path == tmp_path / "lm.arpa"
    assert cfg.labels() == LabelConfig()


def test_load_config_label_layout(tmp_path):
    cfg = load_config(
        _write(
            tmp_path,
            "lm:\n  path: /models/lm.binary\nlabels:\n  apostrophe: 27\n  space: 28\n  blank: 29\n  alphabet_size: 30\n",
        )
    )
    assert str(cfg.lm_path) == "/models/lm.binary"
    assert cfg.labels() == LabelConfig(apostrophe=27, space=28, blank=29, alphabet_size=30)


@pytest.mark.parametrize(
    "text",
    [
        "- a\n- b\n",
        "labels: {}\n",
        "lm: {}\n",
        "lm:\n  path: x\nlabels: [1, 2]\n",
        "lm:\n  path: x\nlabels:\n  blank: 27\n",
        "lm:\n  path: x\nlabels:\n  colour: 3\n",
        "lm:\n  path: x\nlabels:\n  blank: 28.7\n",
        "lm:\n  path: x\nlabels:\n  space: true\n",
        "lm:\n  path: x\nlabels:\n  space: \"27\"\n",
    ],
)
def test_invalid_configs(tmp_path, text):
    with pytest.raises(ConfigError):
        load_config(_write(tmp_path, text))


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_overrides_are_merged(tmp_path):
    p = _write(tmp_path, "lm:\n  path: a.arpa\n  note: keep\n")
    cfg = load_config(p, overrides={"lm": {"path": "b.arpa"}})
    assert cfg.lm_path == tmp_path / "b.arpa"
    assert cfg.require("lm")["note"] == "keep"


def test_deep_update_does_not_touch_base():
    base = {"a": {"b": 1, "c": 2}}
    out = deep_update(base, {"a": {"b": 3}})
    assert out == {"a": {"b": 3, "c": 2}}
    assert base == {"a": {"b": 1, "c": 2}}


def test_scorer_from_config_fails_without_model(tmp_path):
    cfg = load_config(_write(tmp_path, "lm:\n  path: missing.binary\n"))
    with pytest.raises(LanguageModelLoadFailure):
        KenLMBeamScorer.from_config(cfg)
