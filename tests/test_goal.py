import pytest

from colmena.goal import Goal


@pytest.mark.parametrize("goal", list(Goal))
def test_parse_round_trip(goal):
    assert Goal.parse(str(goal)) is goal


def test_keys_spelling():
    assert Goal.parse("keys") is Goal.UPLOAD_KEYS
    assert Goal.parse("dry-activate") is Goal.DRY_ACTIVATE


@pytest.mark.parametrize("bad", ["", "Switch", "upload-keys", "reboot"])
def test_parse_rejects_unknown(bad):
    with pytest.raises(ValueError, match="Not one of"):
        Goal.parse(bad)


def test_as_str():
    assert Goal.BUILD.as_str() is None
    assert Goal.PUSH.as_str() is None
    assert Goal.SWITCH.as_str() == "switch"
    assert Goal.UPLOAD_KEYS.as_str() == "keys"


def test_success_str():
    assert Goal.BOOT.success_str() == "Will be activated next boot"
    assert Goal.BUILD.success_str() == "Configuration built"
    assert len({g.success_str() for g in Goal}) == len(Goal)


@pytest.mark.parametrize(
    "name, switch, activation, persists, target_host",
    [
        ("build", False, False, False, False),
        ("push", False, False, False, True),
        ("switch", True, True, True, True),
        ("boot", True, True, True, True),
        ("test", False, True, False, True),
        ("dry-activate", False, True, False, True),
        ("keys", False, False, False, True),
    ],
)
def test_activation_and_switching(name, switch, activation, persists, target_host):
    goal = Goal.parse(name)
    assert goal.should_switch_profile() is switch
    assert goal.requires_activation() is activation
    assert goal.persists_after_reboot() is persists
    assert goal.requires_target_host() is target_host