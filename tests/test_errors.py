import pytest

from colmena import errors
from colmena.errors import (
    BadOutput,
    ChildFailure,
    ChildKilled,
    ColmenaError,
    ExecError,
    KeyProcessingError,
    Unsupported,
    UnknownError,
    from_returncode,
    unknown,
)


def test_child_failure_message():
    err = ChildFailure(3)
    assert err.exit_code == 3
    assert str(err) == "Child process exited with error code: 3"


def test_from_returncode_positive_is_failure():
    err = from_returncode(2)
    assert isinstance(err, ChildFailure)
    assert err.exit_code == 2


def test_from_returncode_negative_is_killed():
    err = from_returncode(-9)
    assert isinstance(err, ChildKilled)
    assert err.signal == 9
    assert str(err) == "Child process was killed by signal 9"


def test_unknown_wraps_message():
    err = unknown(ValueError("boom"))
    assert isinstance(err, UnknownError)
    assert err.text == "boom"
    assert str(err) == "Unknown error: boom"


def test_simple_error_default_message():
    assert str(Unsupported()) == "This operation is not supported"
    assert str(errors.EmptyNodeName()) == "Node name cannot be empty"


def test_key_error_message():
    err = KeyProcessingError("db-pass", "missing file")
    assert str(err) == 'Error processing key "db-pass": missing file'


def test_bad_output_and_exec_error():
    assert str(BadOutput("garbage")) == "Nix returned invalid response: garbage"
    assert ExecError(4).n_hosts == 4
    assert str(ExecError(4)) == "Exec failed on 4 hosts"


@pytest.mark.parametrize(
    "err",
    [
        Unsupported(),
        ChildFailure(1),
        errors.DeploymentAlreadyExecuted(),
        errors.ValidationError({"field": "bad"}),
    ],
)
def test_all_are_colmena_errors(err):
    with pytest.raises(ColmenaError) as info:
        raise err
    assert info.value is err