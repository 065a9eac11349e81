"""Tests for custom exceptions and the error envelope."""

from __future__ import annotations

import pytest

from ageplateau.errors import (
    ConfigError,
    DegenerateInputError,
    ErrorType,
    MissingOptionalDependencyError,
    NonConvergenceWarning,
    make_error,
)


class TestMissingOptionalDependencyError:
    """Tests for MissingOptionalDependencyError exception."""

    def test_basic(self) -> None:
        exc = MissingOptionalDependencyError("plotting")
        assert exc.extra == "plotting"
        assert "plotting" in str(exc)
        assert "pip install" in str(exc)

    def test_custom_hint(self) -> None:
        exc = MissingOptionalDependencyError("plotting", install_hint="uv add ageplateau[plotting]")
        assert "uv add" in str(exc)

    def test_is_import_error(self) -> None:
        assert isinstance(MissingOptionalDependencyError("plotting"), ImportError)


class TestDegenerateInputError:
    def test_carries_count(self) -> None:
        exc = DegenerateInputError(1)
        assert exc.n_usable == 1
        assert "at least 2" in str(exc)

    def test_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            raise DegenerateInputError(0)

    def test_envelope(self) -> None:
        envelope = DegenerateInputError(0).to_envelope()
        assert envelope.type is ErrorType.DEGENERATE_INPUT
        assert envelope.context == {"n_usable": 0}


def test_config_error_envelope() -> None:
    envelope = ConfigError("bad file").to_envelope()
    assert envelope.type is ErrorType.INVALID_CONFIG
    assert envelope.message == "bad file"


def test_make_error_is_frozen() -> None:
    envelope = make_error(ErrorType.INVALID_DATA, "oops", row=3)
    assert envelope.context == {"row": 3}
    with pytest.raises(Exception):
        envelope.message = "changed"  # type: ignore[misc]


def test_non_convergence_is_runtime_warning() -> None:
    assert issubclass(NonConvergenceWarning, RuntimeWarning)
