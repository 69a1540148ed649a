import dataclasses

import pytest

from colmena.options import EvaluatorType, Options


@pytest.mark.parametrize("evaluator", list(EvaluatorType))
def test_evaluator_round_trip(evaluator):
    assert EvaluatorType.parse(str(evaluator)) is evaluator


def test_evaluator_spelling():
    assert str(EvaluatorType.CHUNKED) == "chunked"
    assert EvaluatorType.parse("streaming") is EvaluatorType.STREAMING


def test_evaluator_rejects_unknown():
    with pytest.raises(ValueError):
        EvaluatorType.parse("parallel")


def test_defaults():
    options = Options()
    assert options.substituters_push is True
    assert options.gzip is True
    assert options.upload_keys is True
    assert options.reboot is False
    assert options.create_gc_roots is False
    assert options.force_build_on_target is None
    assert options.force_replace_unknown_profiles is False
    assert options.evaluator is EvaluatorType.CHUNKED


def test_copy_options_defaults():
    assert Options().copy_options() == {"use_substitutes": True, "gzip": True}


def test_copy_options_follow_settings():
    options = dataclasses.replace(Options(), substituters_push=False, gzip=False)
    assert options.copy_options() == {"use_substitutes": False, "gzip": False}


def test_options_are_independent():
    first = Options()
    second = Options(reboot=True, force_build_on_target=False)
    assert first.reboot is False
    assert second.reboot is True
    assert second.force_build_on_target is False