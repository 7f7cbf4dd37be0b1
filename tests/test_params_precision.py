"""
Parameters Test Suite
Tests for the parameter sets and the precision analysis
"""

from dataclasses import FrozenInstanceError, replace

import pytest
from mpmath import mp

from falcon_core.common import q
from falcon_core.params import derive_param, logn, params
from falcon_core.precision import (
    anti_smooth, check_fft_precision, check_tree, falcon_relative_error,
    fft_error_bound, optimal_renyi_order, reduced_security, sampler_relative_error,
    smooth,
)


class TestParams:
    """Tests for FalconParam and derive_param"""

    @pytest.mark.parametrize("n, logeps", [(512, 35.5), (1024, 36)])
    def test_derive_param_matches_table(self, n, logeps):
        derived = derive_param(n, logeps)
        assert derived.sigmin == pytest.approx(params[n].sigmin, rel=1e-6)
        assert derived.sigma == pytest.approx(params[n].sigma, rel=1e-6)
        assert abs(derived.sig_bound - params[n].sig_bound) <= 1
        assert derived.sig_bytelen == params[n].sig_bytelen

    def test_frozen(self):
        with pytest.raises(FrozenInstanceError):
            params[512].sig_bound = 0

    def test_replace(self):
        strict = replace(params[64], sign_attempts=1)
        assert strict.sign_attempts == 1
        assert params[64].sign_attempts == 64

    @pytest.mark.parametrize("n", sorted(params))
    def test_logn(self, n):
        assert params[n].logn == logn[n]
        assert 1 << params[n].logn == n

    def test_sigma_grows_with_n(self):
        sigmas = [params[n].sigma for n in sorted(params)]
        assert sigmas == sorted(sigmas)


class TestSmoothing:
    """Tests for smooth and anti_smooth"""

    @pytest.mark.parametrize("logeps, dim", [(35.5, 1024), (36, 2048), (64, 1)])
    def test_anti_smooth_inverts_smooth(self, logeps, dim):
        r = smooth(logeps, dim)
        assert float(anti_smooth(r, dim)) == pytest.approx(logeps, rel=1e-9)

    def test_relative_error(self):
        assert falcon_relative_error(64) == 2 * mp.power(2, -64)


class TestPrecision:
    """Tests for the floating-point and sampler precision checks"""

    @pytest.mark.parametrize("n", [2, 64, 512, 1024])
    def test_fft_precision_is_enough(self, n):
        assert check_fft_precision(n, q * n ** 0.5 + params[n].sig_bound ** 0.5)

    def test_fft_precision_is_not_enough(self):
        assert not check_fft_precision(1024, 1e20)

    def test_fft_error_bound_grows_with_n(self):
        bounds = [fft_error_bound(1 << k) for k in range(1, 11)]
        assert bounds == sorted(bounds)
        assert bounds[-1] < mp.mpf(2) ** -45

    def test_check_tree(self, keypair64):
        sk, _ = keypair64
        assert check_tree(sk.tree, params[64])
        assert not check_tree(sk.tree, replace(params[64], sigmin=10))

    def test_sampler_relative_error(self, keypair64):
        sk, _ = keypair64
        re = sampler_relative_error(sk.tree)
        assert 0 < re < mp.mpf(2) ** -30

    def test_security_loss(self):
        re = falcon_relative_error(36)
        queries = mp.mpf(2) ** 64
        a = optimal_renyi_order(queries, re, 256)
        assert a > 0
        loss = reduced_security(queries, a, re, 256)
        assert 0 < loss < 256
