"""
Tests for ClipConfig validation and the error hierarchy.
"""

from dataclasses import FrozenInstanceError

import pytest

from clippoly.config import ClipConfig, DEFAULT_CONFIG, EPSILON, DEFAULT_MAX_ITERATIONS
from clippoly.errors import (
    ClipError,
    InvalidInputError,
    IterationLimitExceededError,
    TraceError,
    TraceFailureError,
    TriangulationInputTooSmallError,
)
from clippoly.tracing import TraceState


class TestClipConfig:
    """Tests for ClipConfig."""

    def test_clip_config_defaults(self):
        config = ClipConfig()
        assert config.epsilon == EPSILON == 1e-9
        assert config.max_iterations == DEFAULT_MAX_ITERATIONS == 1000
        assert config.method == "refined"
        assert config.workers == 1

    def test_clip_config_default_instance(self):
        assert DEFAULT_CONFIG == ClipConfig()

    def test_clip_config_is_frozen(self):
        config = ClipConfig()
        with pytest.raises(FrozenInstanceError):
            config.epsilon = 1.0

    def test_clip_config_accepts_traced(self):
        assert ClipConfig(method="traced").method == "traced"

    def test_clip_config_zero_epsilon_allowed(self):
        assert ClipConfig(epsilon=0.0).epsilon == 0.0

    @pytest.mark.parametrize("epsilon", [-1e-9, float("nan")])
    def test_clip_config_invalid_epsilon(self, epsilon):
        with pytest.raises(InvalidInputError, match="epsilon"):
            ClipConfig(epsilon=epsilon)

    def test_clip_config_epsilon_wrong_type(self):
        with pytest.raises(InvalidInputError, match="real number"):
            ClipConfig(epsilon="small")

    @pytest.mark.parametrize("max_iterations", [0, -5])
    def test_clip_config_invalid_max_iterations(self, max_iterations):
        with pytest.raises(InvalidInputError, match="max_iterations"):
            ClipConfig(max_iterations=max_iterations)

    @pytest.mark.parametrize("max_iterations", [True, 2.5])
    def test_clip_config_max_iterations_wrong_type(self, max_iterations):
        with pytest.raises(InvalidInputError, match="integer"):
            ClipConfig(max_iterations=max_iterations)

    def test_clip_config_unknown_method(self):
        with pytest.raises(InvalidInputError, match="method"):
            ClipConfig(method="lazy")

    def test_clip_config_invalid_workers(self):
        with pytest.raises(InvalidInputError, match="workers"):
            ClipConfig(workers=0)


class TestErrors:
    """Tests for the error hierarchy."""

    @pytest.mark.parametrize("error_class", [
        InvalidInputError,
        TraceFailureError,
        IterationLimitExceededError,
        TriangulationInputTooSmallError,
    ])
    def test_errors_derive_from_clip_error(self, error_class):
        assert issubclass(error_class, ClipError)

    def test_invalid_input_is_value_error(self):
        assert issubclass(InvalidInputError, ValueError)

    def test_trace_error_carries_state(self):
        error = TraceFailureError("stuck", TraceState.TRACE_FAILED)
        assert isinstance(error, TraceError)
        assert error.state is TraceState.TRACE_FAILED
        assert str(error) == "stuck"

    def test_trace_error_state_optional(self):
        assert IterationLimitExceededError("too long").state is None
